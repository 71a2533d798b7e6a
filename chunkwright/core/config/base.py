"""Shared behaviour for chunkwright configuration records.

Configuration records are consumed as partial, plain structured values. A
partial record merges over the documented defaults field-by-field through
``merge``; ``updated`` produces a new record from an existing one without
forgetting which fields the caller actually supplied.
"""

from typing import Any, Dict, Mapping, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..exceptions import ConfigurationError

ConfigT = TypeVar("ConfigT", bound="MergeableConfig")


class MergeableConfig(BaseModel):
    """Base model accepting snake_case or camelCase keys with a merge constructor."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra='ignore',
    )

    @classmethod
    def _field_key(cls, key: str) -> str:
        """Map an alias (``chunkSize``) or field name to the field name."""
        if key in cls.model_fields:
            return key
        for name, info in cls.model_fields.items():
            if info.alias == key:
                return name
        return key

    @classmethod
    def _normalize_keys(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {cls._field_key(k): v for k, v in data.items()}

    @classmethod
    def merge(
        cls: type[ConfigT],
        partial: Optional[Any] = None,
        **overrides: Any
    ) -> ConfigT:
        """Merge a partial record and keyword overrides over the defaults.

        Args:
            partial: None, a mapping of field values, or an existing record
            **overrides: Field values applied last

        Returns:
            Validated configuration record

        Raises:
            ConfigurationError: If a supplied value is invalid
        """
        if isinstance(partial, cls):
            return partial.updated(**overrides)

        data: Dict[str, Any] = {}
        if partial is not None:
            if isinstance(partial, BaseModel):
                partial = partial.model_dump(exclude_unset=True)
            if not isinstance(partial, Mapping):
                raise ConfigurationError(
                    cls.__name__, partial, "Configuration must be a mapping or a config record"
                )
            data.update(cls._normalize_keys(partial))
        data.update(cls._normalize_keys(overrides))

        return cls._validated(data)

    def updated(self: ConfigT, **changes: Any) -> ConfigT:
        """Return a copy with ``changes`` applied on top of the supplied fields."""
        data = {name: getattr(self, name) for name in self.model_fields_set}
        data.update(self._normalize_keys(changes))
        return self._validated(data)

    @classmethod
    def _validated(cls: type[ConfigT], data: Dict[str, Any]) -> ConfigT:
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            errors = e.errors()
            first = errors[0] if errors else {}
            location = ".".join(str(part) for part in first.get("loc", ())) or cls.__name__
            raise ConfigurationError(
                location,
                first.get("input"),
                first.get("msg", str(e)),
                context={"errors": len(errors)},
            ) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase wire dictionary."""
        return self.model_dump(mode='json', by_alias=True)
