"""
数据传输对象（DTO）- 应用层与表现层之间的数据传输

对外 JSON 一律使用 camelCase 字段名；REST 响应与实时广播中的 data 使用同一组 DTO。
"""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from core.response import to_utc_z
from domain.match.entity import MatchEventType, MatchStatus
from domain.user.entity import UserRole


class DTOBase(BaseModel):
    """Base DTO: camelCase aliases and UTC-Z datetimes for all subclasses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_serializer("*", mode="wrap")
    def _serialize_datetimes(self, value: Any, handler) -> Any:
        if isinstance(value, datetime):
            return to_utc_z(value)
        return handler(value)


class RecordDTO(DTOBase):
    """持久化记录的响应 DTO，可直接由领域实体构建"""

    model_config = ConfigDict(from_attributes=True)

    id: str


def dump_record(dto: DTOBase) -> dict:
    """序列化为对外 JSON 结构（camelCase + UTC-Z）"""
    return dto.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# 值对象
# ---------------------------------------------------------------------------

class SocialLinksDTO(DTOBase):
    twitter: Optional[str] = None
    twitch: Optional[str] = None
    youtube: Optional[str] = None


class StreamLinkDTO(DTOBase):
    platform: str
    url: str
    latency: Optional[str] = None


class MatchEventMetadataDTO(DTOBase):
    weapon: Optional[str] = None
    round: Optional[int] = None
    side: Optional[str] = None
    victim: Optional[str] = None


# ---------------------------------------------------------------------------
# 用户
# ---------------------------------------------------------------------------

class UserResponseDTO(RecordDTO):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# 战队
# ---------------------------------------------------------------------------

class TeamCreateDTO(DTOBase):
    """战队创建DTO"""
    name: str = Field(..., min_length=1, max_length=255)
    acronym: Optional[str] = Field(None, max_length=10)
    country: Optional[str] = Field(None, max_length=3)
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    region: Optional[str] = None
    rank: Optional[int] = None
    wins: int = Field(0, ge=0)
    losses: int = Field(0, ge=0)
    social_links: Optional[SocialLinksDTO] = None


class TeamUpdateDTO(DTOBase):
    """战队更新DTO（仅提交的字段生效）"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    acronym: Optional[str] = Field(None, max_length=10)
    country: Optional[str] = Field(None, max_length=3)
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    region: Optional[str] = None
    rank: Optional[int] = None
    wins: Optional[int] = Field(None, ge=0)
    losses: Optional[int] = Field(None, ge=0)
    social_links: Optional[SocialLinksDTO] = None


class TeamDTO(RecordDTO):
    name: str
    acronym: Optional[str] = None
    country: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    region: Optional[str] = None
    rank: Optional[int] = None
    wins: int = 0
    losses: int = 0
    social_links: Optional[SocialLinksDTO] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# 选手
# ---------------------------------------------------------------------------

class PlayerCreateDTO(DTOBase):
    alias: str = Field(..., min_length=1, max_length=100)
    team_id: Optional[str] = None
    real_name: Optional[str] = None
    country: Optional[str] = Field(None, max_length=3)
    avatar_url: Optional[str] = None
    role: Optional[str] = None
    steam_id: Optional[str] = None
    total_matches: int = Field(0, ge=0)
    total_kills: int = Field(0, ge=0)
    total_deaths: int = Field(0, ge=0)
    total_assists: int = Field(0, ge=0)
    average_rating: int = Field(0, description="rating * 100")


class PlayerUpdateDTO(DTOBase):
    alias: Optional[str] = Field(None, min_length=1, max_length=100)
    team_id: Optional[str] = None
    real_name: Optional[str] = None
    country: Optional[str] = Field(None, max_length=3)
    avatar_url: Optional[str] = None
    role: Optional[str] = None
    steam_id: Optional[str] = None
    total_matches: Optional[int] = Field(None, ge=0)
    total_kills: Optional[int] = Field(None, ge=0)
    total_deaths: Optional[int] = Field(None, ge=0)
    total_assists: Optional[int] = Field(None, ge=0)
    average_rating: Optional[int] = None


class PlayerDTO(RecordDTO):
    alias: str
    team_id: Optional[str] = None
    real_name: Optional[str] = None
    country: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Optional[str] = None
    steam_id: Optional[str] = None
    total_matches: int = 0
    total_kills: int = 0
    total_deaths: int = 0
    total_assists: int = 0
    average_rating: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# 比赛
# ---------------------------------------------------------------------------

class MatchCreateDTO(DTOBase):
    team1_id: str
    team2_id: str
    status: MatchStatus = MatchStatus.UPCOMING
    tournament: Optional[str] = None
    stage: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    team1_score: int = Field(0, ge=0)
    team2_score: int = Field(0, ge=0)
    current_map: Optional[str] = None
    maps: Optional[List[str]] = None
    stream_links: Optional[List[StreamLinkDTO]] = None


class MatchUpdateDTO(DTOBase):
    """比分/状态同步使用的部分更新"""
    status: Optional[MatchStatus] = None
    tournament: Optional[str] = None
    stage: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    team1_score: Optional[int] = Field(None, ge=0)
    team2_score: Optional[int] = Field(None, ge=0)
    current_map: Optional[str] = None
    maps: Optional[List[str]] = None
    stream_links: Optional[List[StreamLinkDTO]] = None


class MatchDTO(RecordDTO):
    team1_id: str
    team2_id: str
    status: MatchStatus
    tournament: Optional[str] = None
    stage: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    team1_score: int = 0
    team2_score: int = 0
    current_map: Optional[str] = None
    maps: List[str] = Field(default_factory=list)
    stream_links: List[StreamLinkDTO] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MatchEventPayloadDTO(DTOBase):
    """HTTP 请求体：比赛ID来自路径"""
    event_type: MatchEventType
    description: str = Field(..., min_length=1)
    timestamp: Optional[datetime] = None
    player_id: Optional[str] = None
    metadata: Optional[MatchEventMetadataDTO] = None


class MatchEventCreateDTO(DTOBase):
    """比赛事件创建DTO - HTTP 与 WebSocket 命令共用同一校验"""
    match_id: str = Field(..., min_length=1)
    event_type: MatchEventType
    description: str = Field(..., min_length=1)
    timestamp: Optional[datetime] = None
    player_id: Optional[str] = None
    metadata: Optional[MatchEventMetadataDTO] = None


class MatchEventDTO(RecordDTO):
    match_id: str
    event_type: MatchEventType
    description: str
    timestamp: datetime
    player_id: Optional[str] = None
    metadata: Optional[MatchEventMetadataDTO] = None
    created_at: Optional[datetime] = None


class MatchStatsCreateDTO(DTOBase):
    player_id: str
    kills: int = Field(0, ge=0)
    deaths: int = Field(0, ge=0)
    assists: int = Field(0, ge=0)
    adr: int = Field(0, ge=0)
    headshot_percent: int = Field(0, ge=0, le=100)
    rating: int = Field(0, description="rating * 100")
    opening_kills: int = Field(0, ge=0)


class MatchStatsDTO(RecordDTO):
    match_id: str
    player_id: str
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    adr: int = 0
    headshot_percent: int = 0
    rating: int = 0
    opening_kills: int = 0
    created_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# 新闻 / 评论 / 收藏
# ---------------------------------------------------------------------------

class NewsCreateDTO(DTOBase):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    subtitle: Optional[str] = None
    hero_image_url: Optional[str] = None
    tags: Optional[List[str]] = None
    published: bool = False


class NewsUpdateDTO(DTOBase):
    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = Field(None, min_length=1)
    subtitle: Optional[str] = None
    hero_image_url: Optional[str] = None
    tags: Optional[List[str]] = None
    published: Optional[bool] = None


class NewsDTO(RecordDTO):
    author_id: Optional[str] = None
    title: str
    subtitle: Optional[str] = None
    content: str
    hero_image_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    published: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CommentCreateDTO(DTOBase):
    content: str = Field(..., min_length=1, max_length=5000)
    match_id: Optional[str] = None
    article_id: Optional[str] = None
    parent_comment_id: Optional[str] = None


class CommentUpdateDTO(DTOBase):
    content: str = Field(..., min_length=1, max_length=5000)


class CommentDTO(RecordDTO):
    user_id: str
    content: str
    match_id: Optional[str] = None
    article_id: Optional[str] = None
    parent_comment_id: Optional[str] = None
    likes: int = 0
    flagged: bool = False
    removed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FavoriteCreateDTO(DTOBase):
    team_id: Optional[str] = None
    player_id: Optional[str] = None


class FavoriteDTO(RecordDTO):
    user_id: str
    team_id: Optional[str] = None
    player_id: Optional[str] = None
    created_at: Optional[datetime] = None


class DeletedRefDTO(DTOBase):
    """删除类广播只携带 id"""
    id: str
