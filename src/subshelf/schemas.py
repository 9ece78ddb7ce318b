"""Pydantic schemas for API requests and responses."""

from datetime import date, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from subshelf.relations.models import EpisodeBound, From, Inclusive, Number, RelationRule, RelationTable
from subshelf.rename import CaseTransform, PreviewRow, RenamePlanEntry, RenameScope
from subshelf.services.progress import CompletionStatus, FileRef, FileVisibility, ProgressReport, ProgressState
from subshelf.utils.episode_parser import EpisodeSpec, Range, Single, format_episode_label


class NumberBound(BaseModel):
    type: Literal['number'] = 'number'
    value: int


class FromBound(BaseModel):
    type: Literal['from'] = 'from'
    value: int


class InclusiveBound(BaseModel):
    type: Literal['inclusive'] = 'inclusive'
    begin: int
    end: int


BoundSchema = Annotated[NumberBound | FromBound | InclusiveBound, Field(discriminator='type')]


def bound_to_schema(bound: EpisodeBound) -> NumberBound | FromBound | InclusiveBound:
    match bound:
        case Number(value):
            return NumberBound(value=value)
        case From(value):
            return FromBound(value=value)
        case Inclusive(begin, end):
            return InclusiveBound(begin=begin, end=end)
    raise TypeError(f'Unknown episode bound: {bound!r}')


def bound_from_schema(schema: NumberBound | FromBound | InclusiveBound) -> EpisodeBound:
    match schema:
        case NumberBound():
            return Number(schema.value)
        case FromBound():
            return From(schema.value)
        case InclusiveBound():
            return Inclusive(schema.begin, schema.end)
    raise TypeError(f'Unknown episode bound: {schema!r}')


class RelationRuleResponse(BaseModel):
    """A single relation rule"""

    anilist_id: int
    source: BoundSchema
    destination: BoundSchema

    @classmethod
    def from_rule(cls, rule: RelationRule) -> 'RelationRuleResponse':
        return cls(
            anilist_id=rule.series_id,
            source=bound_to_schema(rule.source),
            destination=bound_to_schema(rule.destination),
        )

    def to_rule(self) -> RelationRule:
        return RelationRule(
            series_id=self.anilist_id,
            source=bound_from_schema(self.source),
            destination=bound_from_schema(self.destination),
        )


class RelationDatesResponse(BaseModel):
    """Cache validation data for the relation table"""

    last_modified: date
    created_at: datetime


class RelationsResponse(RelationDatesResponse):
    """Full relation table"""

    relations: dict[int, list[RelationRuleResponse]] = {}

    @classmethod
    def from_table(cls, table: RelationTable) -> 'RelationsResponse':
        return cls(
            last_modified=table.last_modified,
            created_at=table.created_at,
            relations={
                series_id: [RelationRuleResponse.from_rule(r) for r in rules]
                for series_id, rules in table.relations.items()
            },
        )

    def to_table(self) -> RelationTable:
        return RelationTable(
            last_modified=self.last_modified,
            created_at=self.created_at,
            relations={series_id: [r.to_rule() for r in rules] for series_id, rules in self.relations.items()},
        )


class RenamePreviewRequest(BaseModel):
    """Rename form values and the selected files"""

    files: list[str]
    search: str = ''
    replacement: str = ''
    is_regex: bool = False
    case_sensitive: bool = False
    match_all: bool = False
    scope: RenameScope = RenameScope.FULL
    case_transform: CaseTransform = CaseTransform.NONE


class PreviewRowResponse(BaseModel):
    original: str
    renamed: str
    changed: bool

    @classmethod
    def from_row(cls, row: PreviewRow) -> 'PreviewRowResponse':
        return cls(original=row.original, renamed=row.renamed, changed=row.changed)


class RenameEntry(BaseModel):
    """One {from, to} pair of a rename submission"""

    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias='from')
    to: str

    @classmethod
    def from_entry(cls, entry: RenamePlanEntry) -> 'RenameEntry':
        return cls(from_=entry.from_, to=entry.to)


class RenamePreviewResponse(BaseModel):
    rows: list[PreviewRowResponse]
    plan: list[RenameEntry]


class ValidationErrorResponse(BaseModel):
    field: str
    message: str


class RenameResult(BaseModel):
    """Response of the rename submission endpoint"""

    success: int
    failed: int

    @property
    def total(self) -> int:
        return self.success + self.failed


class FileRefSchema(BaseModel):
    name: str
    size: int = 0
    last_modified: datetime | None = None
    url: str | None = None

    def to_ref(self) -> FileRef:
        return FileRef(name=self.name, size=self.size, last_modified=self.last_modified, url=self.url)


class ProgressStateSchema(BaseModel):
    watched_count: int = Field(ge=0)
    total_episodes: int | None = None
    completion_status: CompletionStatus = CompletionStatus.RELEASING
    next_airing_episode: int | None = None

    def to_state(self) -> ProgressState:
        return ProgressState(
            watched_count=self.watched_count,
            total_episodes=self.total_episodes,
            completion_status=self.completion_status,
            next_airing_episode=self.next_airing_episode,
        )


class ClassifyRequest(BaseModel):
    """Files of an entry and the user's progress for its series"""

    series_id: int
    files: list[FileRefSchema]
    progress: ProgressStateSchema


class EpisodeSpecResponse(BaseModel):
    type: Literal['absent', 'single', 'range']
    start: int | None = None
    end: int | None = None
    label: str

    @classmethod
    def from_spec(cls, spec: EpisodeSpec) -> 'EpisodeSpecResponse':
        label = format_episode_label(spec)
        match spec:
            case Single(number):
                return cls(type='single', start=number, end=number, label=label)
            case Range(start, end):
                return cls(type='range', start=start, end=end, label=label)
            case _:
                return cls(type='absent', label=label)


class FileVisibilityResponse(BaseModel):
    name: str
    hidden: bool
    episode: EpisodeSpecResponse
    resolved: EpisodeSpecResponse

    @classmethod
    def from_visibility(cls, visibility: FileVisibility) -> 'FileVisibilityResponse':
        return cls(
            name=visibility.file.name,
            hidden=visibility.hidden,
            episode=EpisodeSpecResponse.from_spec(visibility.episode),
            resolved=EpisodeSpecResponse.from_spec(visibility.resolved),
        )


class ProgressReportResponse(BaseModel):
    """Per-file visibility and series diagnostics"""

    files: list[FileVisibilityResponse]
    furthest_episode_seen: int
    missing_episodes: list[int]
    is_behind_latest: bool
    is_caught_up: bool
    is_incomplete: bool
    visible_count: int
    progress_label: str

    @classmethod
    def from_report(cls, report: ProgressReport) -> 'ProgressReportResponse':
        return cls(
            files=[FileVisibilityResponse.from_visibility(v) for v in report.files],
            furthest_episode_seen=report.furthest_episode_seen,
            missing_episodes=sorted(report.missing_episodes),
            is_behind_latest=report.is_behind_latest,
            is_caught_up=report.is_caught_up,
            is_incomplete=report.is_incomplete,
            visible_count=report.visible_count,
            progress_label=report.progress_label,
        )
