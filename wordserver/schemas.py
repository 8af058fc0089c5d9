from __future__ import annotations
from pydantic import BaseModel
from typing import Any, Dict, List, Literal, Union

LifecycleState = Literal['starting', 'serving', 'draining', 'stopped']

class LookupResult(BaseModel):
    success: bool
    result: Union[List[str], str]

    @classmethod
    def of(cls, words: List[str]) -> 'LookupResult':
        return cls(success=len(words) > 0, result=words)

    @classmethod
    def failure(cls, message: str) -> 'LookupResult':
        return cls(success=False, result=message)

class ExifResult(BaseModel):
    success: bool
    result: Union[Dict[str, Any], str]

class TemplateNotice(BaseModel):
    generation: int
    loadedAt: float
