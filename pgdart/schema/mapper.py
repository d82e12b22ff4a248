"""Mapping of catalog types onto Dart target types."""

from typing import Dict, Optional, Sequence
import json
import logging

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator

from .introspection import SchemaType
from .registry import TypeRegistry
from .types import (
    TargetType, ListType, EnumType, CompositeType, RecordField, TypeReference,
    PG_TYPE_MAP, DYNAMIC
)
from ..diagnostics.collector import (
    DiagnosticCollector, NO_MATCHING_TYPE, UNRESOLVED_ATTRIBUTE,
    ENUM_COMMENT_INVALID, ENUM_TRANSLATIONS_INVALID
)

logger = logging.getLogger(__name__)

DEFAULT_LOCALES = ('en',)


class EnumComment(BaseModel):
    """Structured enum comment carrying display labels per locale.

    Expected shape::

        {"translations": {"en": {"active": "Active", "done": "Done"}}}

    Every supported locale must be present, no other locale may appear, and
    each locale may only label values the enum actually has. The validation
    context supplies ``values`` and ``locales``.
    """

    model_config = ConfigDict(extra='ignore')

    translations: Dict[str, Dict[str, str]]

    @field_validator('translations')
    @classmethod
    def check_translations(cls, translations: Dict[str, Dict[str, str]], info: ValidationInfo):
        context = info.context or {}
        values = set(context.get('values', ()))
        locales = tuple(context.get('locales', ()))

        unknown = sorted(set(translations) - set(locales))
        if unknown:
            raise ValueError(f"unsupported locales: {', '.join(unknown)}")

        for locale in locales:
            if locale not in translations:
                raise ValueError(f"missing locale '{locale}'")
            extra = sorted(set(translations[locale]) - values)
            if extra:
                raise ValueError(f"locale '{locale}' labels unknown values: {', '.join(extra)}")

        return translations


def parse_enum_translations(
    schema_type: SchemaType,
    supported_locales: Sequence[str],
    diagnostics: DiagnosticCollector
) -> Optional[Dict[str, Dict[str, str]]]:
    """Read the translation table from an enum comment, if it has a valid one."""
    if not schema_type.comment or not schema_type.comment.strip():
        return None

    try:
        raw = json.loads(schema_type.comment)
    except json.JSONDecodeError as e:
        diagnostics.info(
            ENUM_COMMENT_INVALID,
            f"Comment of enum {schema_type.name} is not JSON, skipping translations: {e.msg}",
            subject=schema_type.name
        )
        return None

    try:
        comment = EnumComment.model_validate(
            raw,
            context={'values': schema_type.enums, 'locales': tuple(supported_locales)}
        )
    except ValidationError as e:
        reasons = '; '.join(error['msg'] for error in e.errors())
        diagnostics.warning(
            ENUM_TRANSLATIONS_INVALID,
            f"Ignoring translations of enum {schema_type.name}: {reasons}",
            subject=schema_type.name
        )
        return None

    return comment.translations


class TypeMapper:
    """Maps one catalog type at a time onto a target type.

    Types must be mapped in dependency order so that attribute and element
    types are already present in the registry.
    """

    def __init__(self,
                 supported_locales: Sequence[str] = DEFAULT_LOCALES,
                 diagnostics: Optional[DiagnosticCollector] = None):
        self.supported_locales = tuple(supported_locales)
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticCollector()

    def map_type(self, schema_type: SchemaType, registry: TypeRegistry) -> TargetType:
        """Map a catalog type, falling back to ``dynamic`` when no rule matches."""
        is_array = schema_type.is_array
        base_name = schema_type.base_name

        if is_array:
            element = registry.get(base_name)
            if element is not None:
                return ListType(element)

        builtin = PG_TYPE_MAP.get(base_name)
        if builtin is not None:
            return self._wrap(builtin, is_array)

        if schema_type.enums:
            return self._wrap(self._build_enum(schema_type), is_array)

        if schema_type.attributes:
            return self._wrap(self._build_composite(schema_type, registry), is_array)

        self.diagnostics.warning(
            NO_MATCHING_TYPE,
            f"Could not find matching type for: {schema_type.name} (id {schema_type.id})",
            subject=schema_type.name
        )
        return DYNAMIC

    @staticmethod
    def _wrap(target: TargetType, is_array: bool) -> TargetType:
        return ListType(target) if is_array else target

    def _build_enum(self, schema_type: SchemaType) -> EnumType:
        translations = parse_enum_translations(schema_type, self.supported_locales, self.diagnostics)
        return EnumType(
            name=schema_type.base_name,
            values=tuple(schema_type.enums),
            translations=translations
        )

    def _build_composite(self, schema_type: SchemaType, registry: TypeRegistry) -> CompositeType:
        fields = []
        for attr in schema_type.attributes:
            if attr.type_id == schema_type.id:
                attr_type: TargetType = TypeReference(schema_type.base_name)
            else:
                attr_type = registry.get(attr.type_id)
                if attr_type is None:
                    self.diagnostics.warning(
                        UNRESOLVED_ATTRIBUTE,
                        f"Attribute {attr.name} of {schema_type.name} references unknown type id {attr.type_id}",
                        subject=schema_type.name,
                        attribute=attr.name
                    )
                    attr_type = DYNAMIC
            fields.append(RecordField(attr.name, attr_type))

        return CompositeType(name=schema_type.base_name, fields=tuple(fields))
