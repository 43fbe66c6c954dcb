import re

from pydantic import BaseModel, field_validator

# optional sign then ASCII digits, nothing else
_INTEGER = re.compile(r"[+-]?[0-9]+")


def _first(params, name: str) -> str | None:
    values = params.getlist(name)
    return values[0] if values else None


class FeedFilters(BaseModel):
    min_score: int | None = None
    safe: bool = False
    flair: str | None = None

    @field_validator("flair")
    @classmethod
    def empty_flair_disables_filter(cls, value: str | None) -> str | None:
        return value or None

    @classmethod
    def from_query(cls, params) -> "FeedFilters":
        """Read filters from request query parameters.

        ``params`` is a multi-valued mapping such as Starlette's QueryParams;
        a repeated parameter uses its first value. ``limit`` is the minimum
        score and is ignored unless it is a plain integer, ``safe`` is on only
        for "true" in any case, and an empty ``flair`` means no flair filter.
        """
        limit = _first(params, "limit")
        min_score = None
        if limit is not None and _INTEGER.fullmatch(limit):
            min_score = int(limit)

        return cls(
            min_score=min_score,
            safe=(_first(params, "safe") or "").lower() == "true",
            flair=_first(params, "flair"),
        )
