"""Protected resource rules and the ``uri=..|methods=..|roles=..`` descriptor."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gatekeeper.config.errors import ResourceError

ANY_METHOD = "ANY"
ALL_HTTP_METHODS = (
    "DELETE",
    "GET",
    "HEAD",
    "OPTIONS",
    "PATCH",
    "POST",
    "PUT",
    "TRACE",
)

_TRUE_VALUES = {"1", "t", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "f", "false", "no", "n", "off"}


def _split_list(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


class Resource(BaseModel):
    """An access rule binding a URI pattern to methods and required roles.

    An empty ``methods`` means every method; an empty ``roles`` means any
    authenticated user. ``white_listed`` resources bypass authentication.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    uri: str = ""
    methods: tuple[str, ...] = ()
    roles: tuple[str, ...] = ()
    white_listed: bool = Field(default=False, alias="white-listed")

    @field_validator("methods", mode="after")
    @classmethod
    def _normalize_methods(cls, methods: tuple[str, ...]) -> tuple[str, ...]:
        normalized: list[str] = []
        for method in methods:
            upper = method.upper()
            expanded = ALL_HTTP_METHODS if upper == ANY_METHOD else (upper,)
            normalized.extend(m for m in expanded if m not in normalized)
        return tuple(normalized)

    @classmethod
    def parse(cls, descriptor: str) -> "Resource":
        """Parse ``uri=/admin|methods=GET,POST|roles=admin``."""
        if not descriptor.strip():
            raise ResourceError("the resource has no options")

        values: dict[str, object] = {}
        for segment in descriptor.split("|"):
            parts = segment.split("=")
            if len(parts) != 2:
                raise ResourceError(
                    f"invalid resource keypair '{segment.strip()}', "
                    "should be (uri|roles|methods|white-listed)=comma_values"
                )
            key, value = parts[0].strip(), parts[1].strip()
            match key:
                case "uri":
                    values["uri"] = value
                case "methods":
                    values["methods"] = _split_list(value)
                case "roles":
                    values["roles"] = _split_list(value)
                case "white-listed":
                    values["white_listed"] = _parse_bool(value)
                case _:
                    raise ResourceError(
                        f"invalid identifier '{key}', should be roles, uri, "
                        "methods or white-listed"
                    )
        return cls(**values)

    def is_valid(self) -> None:
        """Raise ResourceError unless the rule can be enforced."""
        if not self.uri:
            raise ResourceError("resource does not have a uri")
        for method in self.methods:
            if method not in ALL_HTTP_METHODS:
                raise ResourceError(
                    f"invalid method {method} on resource {self.uri}"
                )


def _parse_bool(value: str) -> bool:
    """Interpret a white-listed flag value."""
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ResourceError(f"invalid white-listed value '{value}', should be a boolean")
