"""
Validation pipeline coordinator.
Runs every validation stage in dependency order and keeps the current report.
"""

import time
import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set
from dataclasses import dataclass, field
from collections.abc import Mapping
from contextlib import contextmanager

from .config import ValidatorConfig
from .sources.base import AssetSource
from .processing.normalizer import (
    DocumentVariant, InvalidDocumentError, load_document, normalize
)
from .processing.animations import AnimationCollector
from .processing.attachments import AttachmentExtractor
from .processing.atlas import AtlasIndex, build_region_index
from .processing.crossref import cross_reference, missing_by_skin
from .processing.report import ValidationReport, assemble_report


class PipelineStep(Enum):
    """Enumeration of validation steps."""
    LOAD_DOCUMENT = "load_document"
    LOAD_ATLASES = "load_atlases"
    NORMALIZE = "normalize"
    COLLECT_ANIMATIONS = "collect_animations"
    EXTRACT_ATTACHMENTS = "extract_attachments"
    CROSS_REFERENCE = "cross_reference"
    ASSEMBLE_REPORT = "assemble_report"


@dataclass
class StepResult:
    """Result of a pipeline step execution."""
    step: PipelineStep
    success: bool
    duration: float
    message: str = ""
    errors: List[str] = field(default_factory=list)


@dataclass
class PipelineState:
    """State of the latest validation run."""
    current_step: Optional[PipelineStep] = None
    completed_steps: Set[PipelineStep] = field(default_factory=set)
    failed_steps: Set[PipelineStep] = field(default_factory=set)
    step_results: Dict[PipelineStep, StepResult] = field(default_factory=dict)
    diagnostics: List[str] = field(default_factory=list)
    start_time: Optional[float] = None


class PipelineError(Exception):
    """Base exception for pipeline errors."""
    def __init__(self, message: str, step: Optional[PipelineStep] = None):
        super().__init__(message)
        self.step = step


class ValidationPipeline:
    """
    Coordinates one validation run from raw inputs to report.

    Normalization feeds the animation collector and the attachment extractor;
    cross-referencing waits for both the extractor and the full region index.
    Every run rebuilds the report from scratch and replaces ``current_report``.
    """

    def __init__(self, config: Optional[ValidatorConfig] = None):
        """
        Initialize the validation pipeline.

        Args:
            config: Validator configuration
        """
        self.config = config or ValidatorConfig.default()
        self.state = PipelineState()
        self.logger = self._setup_logging()
        self.current_report: Optional[ValidationReport] = None
        self._last_source: Optional[AssetSource] = None

        self._collector = AnimationCollector(self.config.max_walk_depth)
        self._extractor = AttachmentExtractor(self.config)

    def _setup_logging(self) -> logging.Logger:
        """Set up logging for the pipeline."""
        logger = logging.getLogger("spine_validator")
        logger.setLevel(getattr(logging, self.config.log_level.upper(), logging.INFO))

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    def _diagnostic(self, message: str) -> None:
        """Record a progress line for display in an operational log."""
        self.state.diagnostics.append(message)
        self.logger.info(message)

    @contextmanager
    def _step(self, step: PipelineStep):
        """Time a step and record its outcome."""
        self.state.current_step = step
        start = time.time()
        try:
            yield
        except Exception as e:
            self.state.failed_steps.add(step)
            self.state.step_results[step] = StepResult(
                step=step, success=False, duration=time.time() - start,
                message=str(e), errors=[str(e)]
            )
            raise
        else:
            self.state.completed_steps.add(step)
            self.state.step_results[step] = StepResult(
                step=step, success=True, duration=time.time() - start, message="completed"
            )

    def run(self, source: AssetSource) -> ValidationReport:
        """
        Read a source and validate it.

        Args:
            source: Where to read the document, atlases and images from

        Returns:
            The new current ValidationReport

        Raises:
            InvalidDocumentError: If the document is not a JSON object
            SourceError: If files cannot be read
        """
        self.state = PipelineState(start_time=time.time())
        self._last_source = source
        self.logger.info(f"Validating {source.document_name}")

        with self._step(PipelineStep.LOAD_DOCUMENT):
            document = load_document(source.read_document())
            self._diagnostic("Document parsed successfully")

        with self._step(PipelineStep.LOAD_ATLASES):
            atlas_files = source.read_atlases()
            self._diagnostic(f"Loading {len(atlas_files)} atlas files")
            images = source.list_images() if self.config.check_page_images else None
            atlas_index = build_region_index(atlas_files, images, self.config.check_page_images)
            for count in atlas_index.region_counts:
                self._diagnostic(f"Atlas loaded with {count} regions")
            self._diagnostic(f"Total texture regions found: {len(atlas_index.regions)}")

        return self._validate(document, atlas_index.regions, atlas_index.warnings)

    def revalidate(self) -> ValidationReport:
        """
        Re-run validation on the last source, replacing the current report.

        Raises:
            PipelineError: If no source was validated yet
        """
        if self._last_source is None:
            raise PipelineError("Nothing to re-validate: run a validation first")
        self.logger.info("Re-validating")
        return self.run(self._last_source)

    def validate(self, document: Any, region_index: Iterable[str],
                 atlas_warnings: Iterable[str] = ()) -> ValidationReport:
        """
        Validate an already-parsed document against a region index.

        Args:
            document: Parsed skeleton-definition document
            region_index: Lower-cased atlas region names (or an AtlasIndex)
            atlas_warnings: Warnings raised while building the region index

        Returns:
            The new current ValidationReport

        Raises:
            InvalidDocumentError: If document is not a mapping
        """
        self.state = PipelineState(start_time=time.time())
        if isinstance(region_index, AtlasIndex):
            atlas_warnings = tuple(region_index.warnings) + tuple(atlas_warnings)
            region_index = region_index.regions
        return self._validate(document, frozenset(name.lower() for name in region_index), atlas_warnings)

    def _validate(self, document: Any, regions: frozenset,
                  atlas_warnings: Iterable[str]) -> ValidationReport:
        if not isinstance(document, Mapping):
            raise InvalidDocumentError(f"expected a mapping, got {type(document).__name__}")

        warnings = list(atlas_warnings)

        with self._step(PipelineStep.NORMALIZE):
            view = normalize(document)
            self._diagnostic(f"Detected document format: {view.variant.value}")
            if view.variant == DocumentVariant.UNKNOWN:
                warnings.append("Unrecognized document shape; animations were discovered by fallback scan")

        with self._step(PipelineStep.COLLECT_ANIMATIONS):
            animations = self._collector.collect(view)
            self._diagnostic(f"Found {len(animations)} animations")

        with self._step(PipelineStep.EXTRACT_ATTACHMENTS):
            extraction = self._extractor.extract(view)
            self._diagnostic(
                f"Found {len(extraction.defined_attachments)} declared attachments, "
                f"{len(extraction.atlas_requirements)} requiring atlas regions"
            )

        with self._step(PipelineStep.CROSS_REFERENCE):
            missing = cross_reference(extraction.atlas_requirements, regions)
            skin_missing = missing_by_skin(extraction.skin_textures, regions)
            self._diagnostic(
                f"Attachment validation complete: {len(extraction.atlas_requirements)} total, "
                f"{len(missing)} missing"
            )

        with self._step(PipelineStep.ASSEMBLE_REPORT):
            report = assemble_report(
                view.variant, animations, extraction, missing, skin_missing, warnings
            )

        self.current_report = report
        self._diagnostic(
            f"Validation complete: {report.document_type.value} format, "
            f"{report.stats.total_attachments} attachments, "
            f"{len(report.missing_attachments)} missing, {report.stats.total_errors} errors"
        )
        return report


def validate_document(document: Any, region_index: Iterable[str],
                      config: Optional[ValidatorConfig] = None) -> ValidationReport:
    """Validate a parsed document in one call."""
    return ValidationPipeline(config).validate(document, region_index)
