from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Review(BaseModel):
    id: str
    userName: str
    userImage: Optional[str] = None
    date: str = Field(description="ISO-8601 timestamp (UTC)")
    score: int = Field(ge=1, le=5)
    scoreText: str
    url: str
    title: Optional[str] = None
    text: str
    replyDate: Optional[str] = None
    replyText: Optional[str] = None
    version: str

    thumbsUp: Optional[int] = None
    likes: Optional[int] = None
    helpful: Optional[int] = None
    positive: Optional[int] = None
    thumbsDown: Optional[int] = None
    dislikes: Optional[int] = None
    unhelpful: Optional[int] = None
    negative: Optional[int] = None

    criterias: List[str] = Field(default_factory=list)


class ReviewFilters(BaseModel):
    appid: str
    country: str
    lang: Optional[str] = None
    date: Optional[str] = None


class ReviewsResponse(BaseModel):
    success: bool = True
    data: List[Review]
    count: int
    filters: ReviewFilters
    statusCode: int = 200
    timestamp: str


class AppInfoResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any]
    statusCode: int = 200
    timestamp: str


class SearchResponse(BaseModel):
    success: bool = True
    data: List[Dict[str, Any]]
    statusCode: int = 200
    timestamp: str


class SuggestionsResponse(BaseModel):
    success: bool = True
    data: List[str]
    statusCode: int = 200
    timestamp: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime: float
    memory: Dict[str, Any]
    version: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: Optional[Any] = None
    statusCode: int
    timestamp: str
