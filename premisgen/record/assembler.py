"""Record assembly.

Builds the PREMIS graph for one package in independent phases:

1. intellectual_entity: the package as an intellectual entity
2. agents_and_rights: system agent, depositor and the rights statement
3. objects: one file object per source file (metadata, originals,
   derived, schema) with fixity, size, format and links
4. relationships: structural links from the entity to its representations
5. events: the ingest event
6. summary: counts of what actually made it into the graph

Every element is obtained from the instance synthesizer, every value set
through the property binder and every section placed by the graph
attacher. A phase that hits an unavailable element skips that section and
records a warning; an unexpected error fails only its own phase.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from .. import __version__
from ..binding import AttachmentTable, GraphAttacher, InstanceSynthesizer, PropertyBinder
from ..binding.capabilities import iter_children
from ..config import PremisgenConfig, get_config
from ..core.models import BuildReport, FileRole, PhaseResult, SourceFile
from ..errors import BindingError
from ..schema.premis_v3 import BoundElement
from .fixity import FileFacts, detect

logger = logging.getLogger(__name__)

RECORD_VERSION = "3.0"

REPRESENTATION_DIRECTORIES = ("representation/rep1/", "representation/rep2/")

# Kinds counted in the build summary, with their display labels.
SUMMARY_KINDS = {
    "intellectual_entity": "intellectual entities",
    "file": "file objects",
    "agent": "agents",
    "rights": "rights",
    "relationship": "relationships",
    "event": "events",
}


@dataclass
class BuildResult:
    """The finished root graph and what happened while building it."""

    root: Any
    report: BuildReport


@dataclass
class _BuildState:
    root: Any
    package_id: str
    sources: list[SourceFile]
    attacher: GraphAttacher
    started: datetime
    entity: Any = None
    original_ids: dict[int, str] = field(default_factory=dict)
    metadata_ids: list[str] = field(default_factory=list)
    schema_ids: list[str] = field(default_factory=list)
    facts: dict[str, FileFacts] = field(default_factory=dict)

    def of_role(self, role: FileRole) -> list[SourceFile]:
        return [s for s in self.sources if s.role == role]

    @property
    def timestamp(self) -> str:
        return self.started.isoformat(timespec="seconds")


# =============================================================================
# Identifiers
# =============================================================================


def metadata_identifier(source: SourceFile) -> str:
    return f"data/metadata/{source.name}"


def original_identifier(package_id: str, index: int, suffix: str) -> str:
    return f"data/representation/rep1/{package_id}_{index}{suffix.lower()}"


def derived_identifier(package_id: str, index: int) -> str:
    return f"data/representation/rep2/{package_id}_{index}_converted.pdf"


def schema_identifier(source: SourceFile) -> str:
    return f"data/schema/{source.name}"


# =============================================================================
# Assembler
# =============================================================================


class RecordAssembler:
    """Assembles the record graph for a scanned package.

    Args:
        config: Agents, rights and build settings (default: global config)
        synthesizer: Source of binding instances
        binder: Sets property values
        table: Declared containment used by each build's attacher
        detector: Digest/size/format detection for one path
    """

    def __init__(
        self,
        config: PremisgenConfig | None = None,
        synthesizer: InstanceSynthesizer | None = None,
        binder: PropertyBinder | None = None,
        table: AttachmentTable | None = None,
        detector: Callable[..., FileFacts] = detect,
    ):
        self.config = config or get_config()
        self.synthesizer = synthesizer or InstanceSynthesizer()
        self.binder = binder or PropertyBinder()
        self.table = table if table is not None else AttachmentTable.from_module(
            self.synthesizer.bindings
        )
        self.detector = detector

    def build(self, sources: Iterable[SourceFile], package_id: str) -> BuildResult:
        """Build the record graph.

        Raises:
            BindingError: if the root element cannot be synthesized.
        """
        root = self.synthesizer.synthesize("premis")
        if root is None:
            raise BindingError("Cannot create the premis root element from the binding module")
        self.binder.bind(root, "version", RECORD_VERSION)

        state = _BuildState(
            root=root,
            package_id=package_id,
            sources=list(sources),
            attacher=GraphAttacher(self.table),
            started=datetime.now(timezone.utc),
        )
        report = BuildReport(package_id=package_id)

        phases: list[tuple[str, Callable[[_BuildState, PhaseResult], None]]] = [
            ("intellectual_entity", self._intellectual_entity),
            ("agents_and_rights", self._agents_and_rights),
            ("objects", self._objects),
            ("relationships", self._relationships),
            ("events", self._events),
        ]
        for name, run in phases:
            result = PhaseResult(phase=name)
            try:
                run(state, result)
            except Exception as exc:
                logger.warning("Phase %s failed", name, exc_info=True)
                result.failed = True
                result.warn(f"phase failed: {exc}")
            for message in result.warnings:
                logger.warning("%s: %s", name, message)
            logger.debug("Phase %s attached %d section(s)", name, result.attached)
            report.phases.append(result)

        report.summary = self.summarize(root)
        logger.info(
            "Record %s: %s",
            package_id,
            ", ".join(f"{count} {SUMMARY_KINDS[kind]}" for kind, count in report.summary.items()),
        )
        return BuildResult(root=root, report=report)

    def summarize(self, root: Any) -> dict[str, int]:
        """Count the sections of each summary kind reachable from ``root``."""
        expected_types = {}
        for kind_name in SUMMARY_KINDS:
            expected = self.synthesizer.expected_type(self.synthesizer.registry.kind(kind_name))
            if expected is not None:
                expected_types[kind_name] = expected
        counts = {kind: 0 for kind in expected_types}
        stack = [root]
        while stack:
            node = stack.pop()
            for kind, expected in expected_types.items():
                if isinstance(node, expected):
                    counts[kind] += 1
            stack.extend(iter_children(node))
        return counts

    # ── phases ──

    def _intellectual_entity(self, state: _BuildState, result: PhaseResult) -> None:
        entity = self._new("intellectual_entity", result)
        if entity is None:
            return
        self._object_identifier(state, result, entity, state.package_id)

        significant = self.config.build.significant_property
        if significant:
            props = self._new("significant_properties", result)
            if props is not None:
                self._set_text(props, "significantPropertiesType", "content")
                self._set_text(props, "significantPropertiesValue", significant)
                self._place(state, entity, props, result)

        if self._place(state, state.root, entity, result):
            state.entity = entity
            result.attached += 1

    def _agents_and_rights(self, state: _BuildState, result: PhaseResult) -> None:
        agents = self.config.agents
        for profile in (agents.system, agents.depositor):
            agent = self._new("agent", result)
            if agent is None:
                continue
            identifier = self._new("agent_identifier", result)
            if identifier is not None:
                self._set_text(identifier, "agentIdentifierType", profile.identifier_type)
                self._set_text(identifier, "agentIdentifierValue", profile.identifier_value)
                self._place(state, agent, identifier, result)
            self._set_text(agent, "agentName", profile.name)
            self._set_text(agent, "agentType", profile.type)
            if self._place(state, state.root, agent, result):
                result.attached += 1

        rights_cfg = self.config.rights
        rights = self._new("rights", result)
        statement = self._new("rights_statement", result)
        if rights is None or statement is None:
            result.warn("rights section omitted")
            return
        self._set_text(statement, "rightsBasis", rights_cfg.basis)
        granted = self._new("rights_granted", result)
        if granted is not None:
            self._set_text(granted, "act", rights_cfg.act)
            self._set_text(granted, "restriction", rights_cfg.restriction)
            self._place(state, statement, granted, result)
        self._place(state, rights, statement, result)
        if self._place(state, state.root, rights, result):
            result.attached += 1

    def _objects(self, state: _BuildState, result: PhaseResult) -> None:
        build = self.config.build
        package_id = state.package_id

        for source in state.of_role(FileRole.METADATA):
            identifier = metadata_identifier(source)
            if self._file_section(
                state, result, source, identifier, creating_application=True, received=True
            ):
                state.metadata_ids.append(identifier)

        originals = state.of_role(FileRole.ORIGINAL)
        for source in originals:
            identifier = original_identifier(package_id, source.index, source.path.suffix)
            if self._file_section(state, result, source, identifier, received=True):
                state.original_ids[source.index] = identifier

        derived = state.of_role(FileRole.DERIVED)
        if derived:
            for source in derived:
                identifier = derived_identifier(package_id, source.index)
                original_id = state.original_ids.get(source.index)
                if original_id is None:
                    result.warn(f"no original {source.index} for {identifier}; derivation link omitted")
                self._file_section(
                    state,
                    result,
                    source,
                    identifier,
                    format_name=build.derived_format,
                    creating_application=True,
                    derived_from=original_id,
                )
        elif originals:
            logger.info("No converted files; deriving rep2 sections from originals")
            for source in originals:
                original_id = state.original_ids.get(source.index)
                if original_id is None:
                    continue
                self._file_section(
                    state,
                    result,
                    source,
                    derived_identifier(package_id, source.index),
                    format_name=build.derived_format,
                    creating_application=True,
                    derived_from=original_id,
                    original_name=False,
                )

        for source in state.of_role(FileRole.SCHEMA):
            identifier = schema_identifier(source)
            if self._file_section(state, result, source, identifier):
                state.schema_ids.append(identifier)

    def _relationships(self, state: _BuildState, result: PhaseResult) -> None:
        relationship = self._new("relationship", result)
        if relationship is None:
            return
        self._set_text(relationship, "relationshipType", "structural")

        links = [("hasRepresentation", "directory", d) for d in REPRESENTATION_DIRECTORIES]
        related_type = self.config.build.related_identifier_type
        links += [("hasMetadata", related_type, i) for i in state.metadata_ids]
        links += [("hasSchema", related_type, i) for i in state.schema_ids]

        placed = 0
        for sub_type, id_type, value in links:
            element = self._relationship_element(state, result, sub_type, id_type, value)
            if element is not None and self._place(state, relationship, element, result):
                placed += 1
        if not placed:
            result.warn("structural relationship has no relationship elements")

        parent = state.entity if state.entity is not None else state.root
        if self._place(state, parent, relationship, result):
            result.attached += 1

    def _events(self, state: _BuildState, result: PhaseResult) -> None:
        if not self.config.build.ingest_event:
            return
        event = self._new("event", result)
        if event is None:
            return

        identifier = self._new("event_identifier", result)
        if identifier is not None:
            stamp = state.started.strftime("%Y%m%dT%H%M%SZ")
            self._set_text(identifier, "eventIdentifierType", "eventID")
            self._set_text(
                identifier, "eventIdentifierValue", f"EVT-INGEST-{state.package_id}-{stamp}"
            )
            self._place(state, event, identifier, result)
        self._set_text(event, "eventType", "ingest")
        self.binder.bind(event, "eventDateTime", state.timestamp)

        detail = self._new("event_detail_information", result)
        if detail is not None:
            self.binder.bind(
                detail,
                "eventDetail",
                f"Ingest of package {state.package_id} ({len(state.sources)} source files)",
            )
            self._place(state, event, detail, result)

        outcome = self._new("event_outcome_information", result)
        if outcome is not None:
            self._set_text(outcome, "eventOutcome", "success")
            self._place(state, event, outcome, result)

        system = self.config.agents.system
        linking = self._new("linking_agent_identifier", result)
        if linking is not None:
            self._set_text(linking, "linkingAgentIdentifierType", system.identifier_type)
            self._set_text(linking, "linkingAgentIdentifierValue", system.identifier_value)
            self._set_text(linking, "linkingAgentRole", "executing program")
            self._place(state, event, linking, result)

        if self._place(state, state.root, event, result):
            result.attached += 1

    # ── sections ──

    def _file_section(
        self,
        state: _BuildState,
        result: PhaseResult,
        source: SourceFile,
        identifier: str,
        *,
        format_name: str | None = None,
        creating_application: bool = False,
        received: bool = False,
        derived_from: str | None = None,
        original_name: bool = True,
    ) -> bool:
        facts = self._facts(state, result, source)
        if facts is None:
            return False
        obj = self._new("file", result)
        if obj is None:
            result.warn(f"object section for {identifier} omitted")
            return False

        self._object_identifier(state, result, obj, identifier)

        characteristics = self._characteristics(
            state,
            result,
            facts,
            format_name or facts.format_name,
            creating_application=creating_application,
            received=received,
        )
        if characteristics is not None:
            self._place(state, obj, characteristics, result)
        if original_name:
            self.binder.bind(obj, "originalName", source.name)

        if derived_from is not None:
            self._derivation(state, result, obj, identifier, derived_from)

        if not self._place(state, state.root, obj, result):
            return False
        result.attached += 1
        logger.debug("Added %s object %s", source.role.value, identifier)
        return True

    def _characteristics(
        self,
        state: _BuildState,
        result: PhaseResult,
        facts: FileFacts,
        format_name: str,
        *,
        creating_application: bool,
        received: bool,
    ) -> Any:
        characteristics = self._new("object_characteristics", result)
        if characteristics is None:
            return None

        level = self._new("composition_level", result)
        if level is not None and self.binder.bind(level, "value", 0):
            self.binder.bind(characteristics, "compositionLevel", level)

        fixity = self._new("fixity", result)
        if fixity is not None:
            self._set_text(fixity, "messageDigestAlgorithm", facts.algorithm)
            self._set_text(fixity, "messageDigest", facts.digest)
            self._place(state, characteristics, fixity, result)

        self.binder.bind(characteristics, "size", facts.size)

        fmt = self._new("format", result)
        designation = self._new("format_designation", result)
        if fmt is not None and designation is not None:
            self._set_text(designation, "formatName", format_name)
            self._place(state, fmt, designation, result)
            self._place(state, characteristics, fmt, result)

        if creating_application:
            application = self._new("creating_application", result)
            if application is not None:
                self._set_text(
                    application, "creatingApplicationName", self.config.build.creating_application
                )
                self._set_text(application, "creatingApplicationVersion", __version__)
                self._set_text(application, "dateCreatedByApplication", facts.modified)
                self._place(state, characteristics, application, result)

        if received:
            extension = self._new("extension", result)
            if extension is not None:
                self.binder.bind(extension, "any", BoundElement("receivingDate", state.timestamp))
                self._place(state, characteristics, extension, result)

        return characteristics

    def _derivation(
        self,
        state: _BuildState,
        result: PhaseResult,
        obj: Any,
        identifier: str,
        derived_from: str,
    ) -> None:
        relationship = self._new("relationship", result)
        if relationship is None:
            result.warn(f"derivation link omitted for {identifier}")
            return
        self._set_text(relationship, "relationshipType", "derivation")
        element = self._relationship_element(
            state,
            result,
            "derivedFrom",
            self.config.build.related_identifier_type,
            derived_from,
        )
        if element is None:
            result.warn(f"derivation link omitted for {identifier}")
        else:
            self._place(state, relationship, element, result)
        # An empty relationship section is still attached.
        self._place(state, obj, relationship, result)

    def _relationship_element(
        self,
        state: _BuildState,
        result: PhaseResult,
        sub_type: str,
        identifier_type: str,
        identifier_value: str,
    ) -> Any:
        element = self._new("relationship_element", result)
        related = self._new("related_object_identifier", result)
        if element is None or related is None:
            return None
        self._set_text(element, "relationshipSubType", sub_type)
        self._set_text(related, "relatedObjectIdentifierType", identifier_type)
        self._set_text(related, "relatedObjectIdentifierValue", identifier_value)
        if not self._place(state, element, related, result):
            return None
        return element

    def _object_identifier(
        self, state: _BuildState, result: PhaseResult, obj: Any, value: str
    ) -> None:
        identifier = self._new("object_identifier", result)
        if identifier is None:
            return
        self._set_text(identifier, "objectIdentifierType", self.config.build.identifier_type)
        self._set_text(identifier, "objectIdentifierValue", value)
        self._place(state, obj, identifier, result)

    # ── helpers ──

    def _new(self, kind: str, result: PhaseResult) -> Any:
        instance = self.synthesizer.synthesize(kind)
        if instance is None:
            result.warn(f"{kind} not available")
        return instance

    def _place(self, state: _BuildState, parent: Any, child: Any, result: PhaseResult) -> bool:
        if state.attacher.attach(parent, child):
            return True
        result.warn(f"could not attach {type(child).__name__} to {type(parent).__name__}")
        return False

    def _set_text(self, instance: Any, prop: str, text: str) -> bool:
        """Bind text directly, or boxed in a synthesized string-plus-authority."""
        if self.binder.bind(instance, prop, text):
            return True
        boxed = self.synthesizer.synthesize("string_plus_authority")
        if boxed is None or not self.binder.bind(boxed, "value", text):
            return False
        return self.binder.bind(instance, prop, boxed)

    def _facts(self, state: _BuildState, result: PhaseResult, source: SourceFile) -> FileFacts | None:
        key = str(source.path)
        if key not in state.facts:
            try:
                state.facts[key] = self.detector(
                    source.path, chunk_size=self.config.build.hash_chunk_size
                )
            except OSError as exc:
                result.warn(f"cannot read {source.path}: {exc}")
                return None
        return state.facts[key]
