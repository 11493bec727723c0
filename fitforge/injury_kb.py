"""Injury knowledge base loader and lookup utilities."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


KNOWLEDGE_DIR = Path(__file__).resolve().parent / "knowledge"
DEFAULT_KB_PATH = KNOWLEDGE_DIR / "injury_profiles.json"


@dataclass(frozen=True)
class PainTrigger:
    id: str
    label: str
    technical_note: str = ""


@dataclass(frozen=True)
class ExerciseExclusion:
    exercise: str
    reason: str


@dataclass(frozen=True)
class SafeSubstitution:
    target_muscle: str
    exercise: str
    rationale: str


@dataclass(frozen=True)
class RehabExercise:
    exercise: str
    rationale: str
    sets: Optional[int] = None
    reps: Optional[str] = None
    duration: Optional[str] = None


@dataclass(frozen=True)
class InjuryProfile:
    id: str
    label: str
    body_area: str
    pain_triggers: tuple[PainTrigger, ...]
    hard_exclusions: tuple[ExerciseExclusion, ...] = ()
    safe_substitutions: tuple[SafeSubstitution, ...] = ()
    rehab_exercises: tuple[RehabExercise, ...] = ()
    key_principles: tuple[str, ...] = ()


@dataclass(frozen=True)
class InjuryArea:
    """Selectable area without a researched profile (no pain-trigger follow-up)."""
    id: str
    label: str


class InjuryKnowledgeBase:
    """Read-only map of injury-area id -> profile with pain-trigger definitions."""

    def __init__(
        self,
        profiles: dict[str, InjuryProfile],
        additional_areas: Optional[list[InjuryArea]] = None,
        version: str = "",
        source_path: str = "",
    ):
        self._profiles = dict(profiles)
        self._additional = list(additional_areas or [])
        self.version = version
        self.source_path = source_path

    @classmethod
    def from_json(cls, path: str | Path = DEFAULT_KB_PATH) -> "InjuryKnowledgeBase":
        path_obj = Path(path)
        data = json.loads(path_obj.read_text(encoding="utf-8"))
        return cls.from_dict(data, source_path=str(path_obj.resolve()))

    @classmethod
    def from_dict(cls, data: dict[str, Any], source_path: str = "") -> "InjuryKnowledgeBase":
        profiles: dict[str, InjuryProfile] = {}
        for item in data.get("profiles", []):
            profiles[item["id"]] = InjuryProfile(
                id=item["id"],
                label=item.get("label", item["id"]),
                body_area=item.get("body_area", ""),
                pain_triggers=tuple(
                    PainTrigger(
                        id=t["id"],
                        label=t.get("label", t["id"]),
                        technical_note=t.get("technical_note", ""),
                    )
                    for t in item.get("pain_triggers", [])
                ),
                hard_exclusions=tuple(
                    ExerciseExclusion(e["exercise"], e.get("reason", ""))
                    for e in item.get("hard_exclusions", [])
                ),
                safe_substitutions=tuple(
                    SafeSubstitution(s.get("target_muscle", ""), s["exercise"], s.get("rationale", ""))
                    for s in item.get("safe_substitutions", [])
                ),
                rehab_exercises=tuple(
                    RehabExercise(
                        exercise=r["exercise"],
                        rationale=r.get("rationale", ""),
                        sets=r.get("sets"),
                        reps=r.get("reps"),
                        duration=r.get("duration"),
                    )
                    for r in item.get("rehab_exercises", [])
                ),
                key_principles=tuple(item.get("key_principles", [])),
            )
        additional = [InjuryArea(a["id"], a.get("label", a["id"])) for a in data.get("additional_areas", [])]
        return cls(profiles, additional, version=str(data.get("version", "")), source_path=source_path)

    def get(self, area_id: str) -> Optional[InjuryProfile]:
        return self._profiles.get(area_id)

    def __contains__(self, area_id: str) -> bool:
        return area_id in self._profiles

    def list_profiles(self) -> list[InjuryProfile]:
        return list(self._profiles.values())

    def list_additional_areas(self) -> list[InjuryArea]:
        return list(self._additional)

    def pain_triggers_for(self, area_id: str) -> tuple[PainTrigger, ...]:
        profile = self.get(area_id)
        return profile.pain_triggers if profile else ()


_default_kb: Optional[InjuryKnowledgeBase] = None


def load_default_knowledge_base() -> InjuryKnowledgeBase:
    """Load the bundled knowledge base once per process."""
    global _default_kb
    if _default_kb is None:
        _default_kb = InjuryKnowledgeBase.from_json(DEFAULT_KB_PATH)
    return _default_kb
