from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ApiModel(BaseModel):
    # 前端使用 camelCase 字段名
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class EpisodeCounts(_ApiModel):
    sub: int = Field(0, ge=0, description="字幕版集数")
    dub: int = Field(0, ge=0, description="配音版集数")


class SpotlightEntry(_ApiModel):
    """
    首页轮播（spotlight）中的一条
    """
    id: str = Field("", description="链接 href 的最后一段，比如 'one-piece-100'")
    title: str = ""
    description: str = ""
    poster: str = Field("", description="封面图片 URL")
    rank: int = Field(..., ge=1, description="按页面顺序从 1 开始的排名")


class ListingEntry(_ApiModel):
    """
    列表卡片：首页 trending 和搜索结果共用
    """
    id: str = ""
    title: str = ""
    poster: str = Field("", description="懒加载图片地址（data-src）")
    type: str = Field("", description="类型标签，比如 'TV' / 'Movie'")
    duration: str = Field("", description="时长标签，比如 '24m'")
    episode_counts: Optional[EpisodeCounts] = None


class HomePage(_ApiModel):
    spotlight: List[SpotlightEntry] = Field(default_factory=list)
    trending: List[ListingEntry] = Field(default_factory=list)
    timestamp: str = Field(..., description="抓取时间，ISO8601（UTC，'Z' 结尾）")


class SearchPage(_ApiModel):
    results: List[ListingEntry] = Field(default_factory=list)
    current_page: int = Field(1, ge=1)
    query: str


class AnimeDetails(_ApiModel):
    """
    单部作品详情。id 是调用方传入的值，不从页面解析。
    """
    id: str
    title: str = ""
    poster: str = Field("", description="原图地址（src），不是懒加载的 data-src")
    description: str = ""
    type: str = ""
    status: str = ""
    genres: List[str] = Field(default_factory=list)
    episode_counts: EpisodeCounts = Field(default_factory=EpisodeCounts)


class ApiEnvelope(_ApiModel):
    """
    所有接口统一的返回结构：成功时带 data，失败时带 error。
    """
    success: bool
    data: Optional[Union[HomePage, SearchPage, AnimeDetails]] = None
    error: Optional[str] = None

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class EndpointInfo(_ApiModel):
    path: str
    description: str


class EndpointCatalog(_ApiModel):
    """
    未知 action 时返回的接口说明
    """
    success: bool = True
    message: str
    endpoints: List[EndpointInfo]

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
