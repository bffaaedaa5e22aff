# fitz_patchwork/synthesis/pipeline.py
"""
Plan synthesis pipeline: raw model response -> final list of FileEdits.

Stages run in a fixed order, each a pure transformation of the plan:

1. Route set resolution (features requested by the query)
2. Block extraction with classifier fallback
3. Scaffold synthesis for missing supporting files
4. Text normalization of every edit
5. Schema merging against the schema file on disk
6. Composition file splicing for new leaf components

Nothing here touches the network or the filesystem; project state comes
in as text gathered beforehand.
"""

import logging
from dataclasses import dataclass, field

from fitz_patchwork.compose import TreePatcher
from fitz_patchwork.config.schema import LayoutConfig
from fitz_patchwork.errors import ExtractionMissError

from .extractor import extract_file_edits
from .paths import same_path
from .routes import resolve_route_set
from .scaffold import ScaffoldSynthesizer
from .schema_merge import merge_schema
from .text_patch import normalize_content
from .types import FeatureRequest, FileEdit

logger = logging.getLogger(__name__)


@dataclass
class PlanResult:
    """Outcome of one synthesis run."""

    edits: list[FileEdit]
    features: list[FeatureRequest] = field(default_factory=list)
    extracted: int = 0
    synthesized: int = 0

    @property
    def paths(self) -> list[str]:
        return [edit.path for edit in self.edits]


class PlanSynthesizer:
    """
    Turns a model response into the final write plan.

    Args:
        layout: Project layout
        context_description: Gathered project context text
        existing_schema: Schema file text on disk, None when absent
        composition_text: Composition file text on disk, None when absent
    """

    def __init__(
        self,
        layout: LayoutConfig | None = None,
        context_description: str = "",
        existing_schema: str | None = None,
        composition_text: str | None = None,
    ):
        self.layout = layout or LayoutConfig()
        self.context_description = context_description
        self.existing_schema = existing_schema
        self.composition_text = composition_text

    def merge_schema_edits(self, edits: list[FileEdit]) -> list[FileEdit]:
        if self.existing_schema is None:
            return edits
        result = []
        for edit in edits:
            if same_path(edit.path, self.layout.schema_path, self.layout):
                edit = FileEdit(path=edit.path, content=merge_schema(self.existing_schema, edit.content))
            result.append(edit)
        return result

    def synthesize(self, query: str, response_text: str) -> PlanResult:
        """
        Build the plan for one query/response pair.

        Args:
            query: User query
            response_text: Raw model response

        Returns:
            PlanResult with the final edits in write order

        Raises:
            ExtractionMissError: If no file/code pairs can be recovered
        """
        features = resolve_route_set(query)
        if features:
            logger.info(f"Requested features: {', '.join(f.route_name for f in features)}")

        extracted = extract_file_edits(response_text, query, self.layout)
        if not extracted:
            raise ExtractionMissError(response_text)

        scaffolder = ScaffoldSynthesizer(
            self.layout, self.context_description, self.existing_schema or ""
        )
        edits = scaffolder.synthesize(extracted, features)
        synthesized = len(edits) - len(extracted)

        edits = [normalize_content(edit, self.layout) for edit in edits]
        edits = self.merge_schema_edits(edits)
        edits = TreePatcher(self.layout).patch_plan(edits, self.composition_text)

        logger.info(f"Plan ready: {len(edits)} files ({len(extracted)} extracted, {synthesized} synthesized)")
        return PlanResult(edits=edits, features=features, extracted=len(extracted), synthesized=synthesized)
