"""
Batch pipeline for feature toggle generation.
Validates a batch of declarations, checks it for naming collisions and emits
every per-feature and aggregate module.
"""
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Tuple
from pydantic import BaseModel
from core import aggregate
from core.declarations import DeclarationRecord
from core.descriptors import DescriptorBuilder
from core.diagnostics import Diagnostic, NamingCollisionError, has_errors
from core.generators import generate_domain, generate_dto
from core.ir import FeatureDescriptor
from core.naming import (
    attribute_name,
    fixture_name,
    mapper_name,
    module_name,
    nested_fixture_name,
    nested_mapper_name,
    use_case_name,
)
from core.syntax import GeneratedFile, SourceModule
from utils.logger import Logger

# AppConfig attributes that would shadow the generated classes' own members
RESERVED_ATTRIBUTES = frozenset(dir(BaseModel)) | {"DEFAULT"}

_CLAIM_LABELS = {
    "name": "Generated name",
    "module": "Generated module",
    "enum": "FeatureToggles entry",
    "key": "Feature key",
    "attribute": "AppConfig attribute",
    "fixture": "Fixture",
}


class GenerationResult(BaseModel):
    """
    Outcome of one batch.

    Attributes:
        package: Output namespace, None when no declaration was valid
        files: Generated files sorted by path
        diagnostics: Diagnostics of every declaration in batch order
    """
    package: Optional[str] = None
    files: List[GeneratedFile] = []
    diagnostics: List[Diagnostic] = []

    @property
    def has_errors(self) -> bool:
        return has_errors(self.diagnostics)


def feature_claims(feature: FeatureDescriptor) -> List[Tuple[str, str]]:
    """Every (category, value) a feature reserves in the generated package."""
    naming = feature.naming
    use_case = use_case_name(naming.domain_name)
    claims = [
        ("name", naming.dto_name),
        ("name", naming.domain_name),
        ("name", use_case),
        ("name", mapper_name(naming.domain_name)),
        ("module", module_name(naming.dto_name)),
        ("module", module_name(naming.domain_name)),
        ("module", module_name(use_case)),
        ("fixture", fixture_name(naming.dto_name)),
        ("fixture", fixture_name(naming.domain_name)),
        ("enum", naming.enum_name),
        ("key", feature.key),
        ("attribute", attribute_name(feature.key)),
    ]
    # Nested classes are scoped to their feature; only their mapper and fixtures
    # share the batch-wide modules, under names qualified by the feature
    for nested in feature.nested_configs:
        claims.extend([
            ("name", nested_mapper_name(naming.domain_name, nested.domain_name)),
            ("fixture", nested_fixture_name(naming.domain_name, nested.dto_name)),
            ("fixture", nested_fixture_name(naming.domain_name, nested.domain_name)),
        ])
    return claims


def find_collisions(features: Iterable[FeatureDescriptor]) -> List[Diagnostic]:
    """
    Detect generated names claimed more than once, or claiming a reserved name.

    A feature whose own names clash (e.g. identical dtoName and domainName
    overrides) collides with itself.
    """
    reserved = {
        "name": aggregate.RESERVED_NAMES,
        "module": aggregate.RESERVED_MODULES,
        "fixture": frozenset({fixture_name(aggregate.APP_CONFIG), fixture_name(aggregate.APP_CONFIG_DTO)}),
        "attribute": RESERVED_ATTRIBUTES,
    }
    owners: Dict[Tuple[str, str], List[FeatureDescriptor]] = defaultdict(list)
    for feature in features:
        for claim in feature_claims(feature):
            owners[claim].append(feature)

    diagnostics: List[Diagnostic] = []
    for (category, value), claimants in owners.items():
        label = _CLAIM_LABELS[category]
        names = ", ".join(claimant.source_name for claimant in claimants)
        if value in reserved.get(category, ()):
            message = f"{label} '{value}' is reserved"
        elif len(claimants) > 1:
            message = f"{label} '{value}' is claimed by {names}"
        else:
            continue
        diagnostics.append(Diagnostic.error(message, names, claimants[0].source))
    return diagnostics


def feature_modules(feature: FeatureDescriptor, package: str) -> List[SourceModule]:
    """Per-feature modules: DTO, domain model (nested configs are inner classes of both) and the use case."""
    return [
        generate_dto(feature, package),
        generate_domain(feature, package),
        aggregate.generate_use_case(feature, package),
    ]


def aggregate_modules(features: List[FeatureDescriptor], package: str) -> List[SourceModule]:
    return [
        aggregate.generate_enum(features, package),
        aggregate.generate_app_config_dto(features, package),
        aggregate.generate_app_config(features, package),
        aggregate.generate_mappers_module(features, package),
        aggregate.generate_feature_gate(package),
        aggregate.generate_fixtures(features, package),
        aggregate.generate_package_init(features, package),
    ]


class FeatureToggleGenerator:
    """
    Generates the feature toggle package of one batch of declarations.

    Output only depends on the records: the same batch always renders to the
    same files in the same order.
    """

    def __init__(self, logger: Logger, default_package: str = "feature_toggles", workers: int = 1) -> None:
        self._logger = logger
        self._builder = DescriptorBuilder(logger, default_package)
        self._workers = max(1, workers)

    def generate(self, records: Iterable[DeclarationRecord]) -> GenerationResult:
        """
        Run the whole batch.

        Args:
            records: Declaration records in batch order

        Returns:
            GenerationResult with the files of every valid feature

        Raises:
            NamingCollisionError: When two features resolve to the same generated name
        """
        records = list(records)
        self._logger.log_info(f"Processing {len(records)} declarations", "pipeline")

        features, diagnostics = self._builder.build_all(records)
        for diagnostic in diagnostics:
            self._logger.log_diagnostic(diagnostic, "pipeline")

        if not features:
            self._logger.log_info("No valid feature toggles found, nothing generated", "pipeline")
            return GenerationResult(diagnostics=diagnostics)

        collisions = find_collisions(features)
        if collisions:
            for collision in collisions:
                self._logger.log_diagnostic(collision, "pipeline")
            raise NamingCollisionError(collisions)

        package = features[0].package
        for feature in features[1:]:
            if feature.package != package:
                warning = Diagnostic.warning(
                    f"Package '{feature.package}' differs from '{package}'; generating into '{package}'",
                    feature.source_name,
                    feature.source,
                )
                self._logger.log_diagnostic(warning, "pipeline")
                diagnostics.append(warning)

        files = self._render_features(features, package)
        files.extend(module.to_file() for module in aggregate_modules(features, package))
        files.sort(key=lambda generated: generated.path)

        self._logger.log_info(
            f"Generated {len(files)} files for {len(features)} features",
            "pipeline",
            {"package": package, "features": [feature.source_name for feature in features]},
        )
        return GenerationResult(package=package, files=files, diagnostics=diagnostics)

    def _render_features(self, features: List[FeatureDescriptor], package: str) -> List[GeneratedFile]:
        def render(feature: FeatureDescriptor) -> List[GeneratedFile]:
            return [module.to_file() for module in feature_modules(feature, package)]

        if self._workers == 1 or len(features) == 1:
            rendered = [render(feature) for feature in features]
        else:
            with ThreadPoolExecutor(max_workers=self._workers) as pool:
                rendered = list(pool.map(render, features))
        return [generated for files in rendered for generated in files]
