# fitz_patchwork/synthesis/scaffold.py
"""
Scaffold synthesis: fill in the supporting files a model left out.

Each run computes the requirements once (connection bootstrap, schema
sync, seed data, one route handler per requested feature) and satisfies
each missing one exactly once from a template. A requirement counts as
present when the plan already holds the file or the gathered project
context mentions its path.
"""

import logging
from pathlib import Path
from string import Template

from fitz_patchwork.config.schema import LayoutConfig

from .paths import normalize_path
from .schema_merge import table_columns, table_symbols
from .types import FeatureRequest, FileEdit, ScaffoldKind, ScaffoldRequirement

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).parent / "templates"
_SAMPLE_RECORDS = 3


def load_template(name: str) -> Template:
    """Load a scaffold template (e.g. 'route.ts') from the package."""
    template_path = _TEMPLATE_DIR / f"{name}.txt"
    if not template_path.exists():
        raise FileNotFoundError(f"Template not found: {template_path}")
    return Template(template_path.read_text(encoding="utf-8"))


def required_scaffolds(features: list[FeatureRequest]) -> list[ScaffoldRequirement]:
    requirements = [
        ScaffoldRequirement(ScaffoldKind.CONNECTION),
        ScaffoldRequirement(ScaffoldKind.SCHEMA_SYNC),
        ScaffoldRequirement(ScaffoldKind.SEED_DATA),
    ]
    requirements.extend(ScaffoldRequirement(ScaffoldKind.ROUTE_HANDLER, f) for f in features)
    return requirements


def _sample_value(column: str, builder: str, call: str, index: int) -> str | None:
    if builder in ("text", "varchar"):
        return f"'Sample {column} {index}'"
    if builder == "timestamp" or "timestamp" in call:
        return "new Date()"
    if builder == "boolean" or "boolean" in call:
        return "true" if index % 2 else "false"
    if builder in ("real", "numeric"):
        return f"{index * 1.5}"
    if builder == "integer":
        return str(index)
    return None


def sample_records(columns: list[tuple[str, str, str]], count: int = _SAMPLE_RECORDS) -> list[str]:
    """Literal object records for a table's insertable columns."""
    insertable = [
        (name, builder, call) for name, builder, call in columns
        if "primaryKey" not in call and "default" not in call
    ]
    records = []
    for index in range(1, count + 1):
        fields = []
        for name, builder, call in insertable:
            value = _sample_value(name, builder, call, index)
            if value is not None:
                fields.append(f"{name}: {value}")
        if not fields:
            fields.append(f"name: 'Sample item {index}'")
        records.append("{ " + ", ".join(fields) + " }")
    return records


class ScaffoldSynthesizer:
    """
    Synthesizes missing scaffold files for one run.

    Args:
        layout: Project layout
        context_description: Gathered project context text (presence checks)
        existing_schema: Schema file content on disk ("" when absent)
    """

    def __init__(
        self,
        layout: LayoutConfig | None = None,
        context_description: str = "",
        existing_schema: str = "",
    ):
        self.layout = layout or LayoutConfig()
        self.context_description = context_description.casefold()
        self.existing_schema = existing_schema

    def _in_plan(self, path: str, edits: list[FileEdit]) -> bool:
        key = normalize_path(path, self.layout)
        return any(normalize_path(edit.path, self.layout) == key for edit in edits)

    def _on_disk(self, path: str) -> bool:
        return normalize_path(path, self.layout) in self.context_description

    def is_present(self, requirement: ScaffoldRequirement, edits: list[FileEdit]) -> bool:
        if requirement.kind is ScaffoldKind.ROUTE_HANDLER:
            route = requirement.feature.route_name
            routes_key = normalize_path(self.layout.routes_dir, self.layout)
            for edit in edits:
                key = normalize_path(edit.path, self.layout)
                if key.startswith(routes_key) and route in key:
                    return True
            return self._on_disk(self.layout.route_path(route))
        path = self.path_for(requirement)
        return self._in_plan(path, edits) or self._on_disk(path)

    def path_for(self, requirement: ScaffoldRequirement) -> str:
        if requirement.kind is ScaffoldKind.CONNECTION:
            return self.layout.connection_path
        if requirement.kind is ScaffoldKind.SCHEMA_SYNC:
            return self.layout.sync_path
        if requirement.kind is ScaffoldKind.SEED_DATA:
            return self.layout.seed_path
        return self.layout.route_path(requirement.feature.route_name)

    def _schema_text(self, edits: list[FileEdit]) -> str:
        """On-disk schema followed by any schema content in the plan."""
        schema_key = normalize_path(self.layout.schema_path, self.layout)
        planned = [e.content for e in edits if normalize_path(e.path, self.layout) == schema_key]
        return "\n\n".join([self.existing_schema, *planned])

    def _connection(self, edits: list[FileEdit], features: list[FeatureRequest]) -> str | None:
        return load_template("connection.ts").substitute(database_file=self.layout.database_file)

    def _sync(self, edits: list[FileEdit], features: list[FeatureRequest]) -> str | None:
        symbols = list(dict.fromkeys(table_symbols(self._schema_text(edits))))
        if not symbols:
            logger.info("No schema tables known, skipping schema sync scaffold")
            return None
        statements = "\n".join(f"    await db.select().from({s}).limit(1);" for s in symbols)
        return load_template("sync.ts").substitute(
            symbols=", ".join(symbols), statements=statements, count=len(symbols)
        )

    def _seed(self, edits: list[FileEdit], features: list[FeatureRequest]) -> str | None:
        schema = self._schema_text(edits)
        symbols = table_symbols(schema)
        if features:
            symbol = features[0].symbol_name
        elif symbols:
            symbol = symbols[-1]
        else:
            logger.info("No table to seed, skipping seed scaffold")
            return None
        records = sample_records(table_columns(schema, symbol))
        return load_template("seed.ts").substitute(
            symbol=symbol, records="\n".join(f"      {r}," for r in records)
        )

    def _route(self, feature: FeatureRequest) -> str:
        return load_template("route.ts").substitute(
            symbol=feature.symbol_name, label=feature.route_name
        )

    def synthesize(self, edits: list[FileEdit], features: list[FeatureRequest]) -> list[FileEdit]:
        """
        Return edits plus one synthesized FileEdit per missing requirement.

        Args:
            edits: Extracted FileEdits (not modified)
            features: Requested features, in resolution order

        Returns:
            New list: the original edits followed by synthesized scaffolds
        """
        result = list(edits)
        builders = {
            ScaffoldKind.CONNECTION: self._connection,
            ScaffoldKind.SCHEMA_SYNC: self._sync,
            ScaffoldKind.SEED_DATA: self._seed,
        }
        for requirement in required_scaffolds(features):
            if self.is_present(requirement, result):
                continue
            if requirement.kind is ScaffoldKind.ROUTE_HANDLER:
                content = self._route(requirement.feature)
            else:
                content = builders[requirement.kind](result, features)
            if content is None:
                continue
            path = self.path_for(requirement)
            logger.info(f"Synthesized {requirement.kind.value} scaffold: {path}")
            result.append(FileEdit(path=path, content=content))
        return result
