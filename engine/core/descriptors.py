"""
Descriptor builder.
Validates raw declaration records and turns them into feature descriptors.
"""
from typing import Iterable, List, Optional, Tuple
from core.collector import collect, resolve_type
from core.declarations import DeclarationRecord
from core.diagnostics import Diagnostic
from core.ir import DefaultKind, FeatureDescriptor, FeatureField, TypeKind
from core.naming import derive_feature_name, is_identifier, resolve_naming
from utils.logger import Logger

# Attributes the generated FeatureToggles enum sets on its members
RESERVED_ENUM_NAMES = frozenset({"key", "title", "default_enabled", "name", "value"})


class DescriptorBuilder:
    """Builds one FeatureDescriptor per valid declaration; invalid ones become diagnostics."""

    def __init__(self, logger: Logger, default_package: str = "feature_toggles") -> None:
        self._logger = logger
        self._default_package = default_package

    def build_all(
        self, records: Iterable[DeclarationRecord]
    ) -> Tuple[List[FeatureDescriptor], List[Diagnostic]]:
        """
        Build descriptors for a whole batch.

        Args:
            records: Declaration records in batch order

        Returns:
            Tuple of (valid descriptors in batch order, diagnostics of all records)
        """
        descriptors: List[FeatureDescriptor] = []
        diagnostics: List[Diagnostic] = []
        for record in records:
            descriptor, record_diagnostics = self.build(record)
            diagnostics.extend(record_diagnostics)
            if descriptor is not None:
                descriptors.append(descriptor)
        return descriptors, diagnostics

    def build(self, record: DeclarationRecord) -> Tuple[Optional[FeatureDescriptor], List[Diagnostic]]:
        """Validate one record and build its descriptor, or None when the record is invalid."""
        error = self._structural_error(record)
        if error:
            return None, [Diagnostic.error(error, record.name, record.source)]

        annotation = record.annotation
        package = record.package.strip() or self._default_package
        if not all(is_identifier(part) for part in package.split(".")):
            return None, [Diagnostic.error(f"Package '{package}' is not a valid Python package", record.name, record.source)]

        for label, override in (
            ("dtoName", annotation.dto_name),
            ("domainName", annotation.domain_name),
            ("enumName", annotation.enum_name),
        ):
            if override and not is_identifier(override):
                return None, [Diagnostic.error(f"'{label}' override '{override}' is not a valid identifier", record.name, record.source)]

        feature_name = derive_feature_name(record.name)
        naming = resolve_naming(record.name, annotation.dto_name, annotation.domain_name, annotation.enum_name)
        if naming.enum_name.startswith("_") or naming.enum_name in RESERVED_ENUM_NAMES:
            return None, [Diagnostic.error(f"Enum name '{naming.enum_name}' is reserved", record.name, record.source)]

        key = (annotation.key or "").strip() or feature_name

        collection = collect(record.parameters, record.nested)
        if collection.problems:
            message = "Invalid fields: " + "; ".join(collection.problems)
            return None, [Diagnostic.error(message, record.name, record.source)]

        nested_names = [config.class_name for config in collection.nested_configs]
        duplicates = sorted({name for name in nested_names if nested_names.count(name) > 1})
        if duplicates:
            return None, [Diagnostic.error(f"Nested config names must be unique: {duplicates}", record.name, record.source)]

        inner_names = {name for config in collection.nested_configs for name in (config.dto_name, config.domain_name)}
        shadowed = sorted(field.name for field in collection.fields if field.name in inner_names)
        if shadowed:
            return None, [Diagnostic.error(f"Fields shadow generated nested config classes: {shadowed}", record.name, record.source)]

        diagnostics: List[Diagnostic] = []
        for problem in collection.nested_problems:
            diagnostics.append(Diagnostic.warning(f"Skipped nested field {problem}", record.name, record.source))
        for ignored in collection.ignored:
            self._logger.log_debug(
                f"Ignoring '{ignored}': nested configs are collected one level deep",
                "descriptors",
                {"declaration": record.name},
            )

        fields = tuple(collection.fields)
        for config in collection.nested_configs:
            diagnostics.extend(self._opaque_warnings(record, config.fields, f"{config.class_name}."))
        diagnostics.extend(self._opaque_warnings(record, fields, ""))

        descriptor = FeatureDescriptor(
            package=package,
            source_name=record.name,
            feature_name=feature_name,
            title=annotation.title.strip(),
            key=key,
            enabled_default=annotation.default_enabled,
            fields=fields,
            nested_configs=tuple(collection.nested_configs),
            naming=naming,
            source=record.source,
        )
        return descriptor, diagnostics

    def _structural_error(self, record: DeclarationRecord) -> Optional[str]:
        if record.kind != "data_class":
            return "Feature toggles can only be declared on data classes"
        if not record.has_primary_constructor:
            return "Feature toggles require a primary constructor"
        if not (record.annotation.title or "").strip():
            return "'title' is required"

        has_enabled = any(
            parameter.name == "enabled" and resolve_type(parameter.type).kind == TypeKind.BOOL
            for parameter in record.parameters
        )
        if not has_enabled:
            return "Feature toggles require an 'enabled: Bool' field"

        missing = [parameter.name for parameter in record.parameters if not parameter.has_default]
        if missing:
            return f"All fields must have default values: {missing}"
        return None

    def _opaque_warnings(
        self, record: DeclarationRecord, fields: Iterable[FeatureField], prefix: str
    ) -> List[Diagnostic]:
        return [
            Diagnostic.warning(
                f"Field '{prefix}{field.name}' has opaque type '{field.type.name}'; "
                f"its default falls back to '{field.type.name}()'",
                record.name,
                record.source,
            )
            for field in fields
            if field.default.kind == DefaultKind.CONSTRUCTOR
        ]
