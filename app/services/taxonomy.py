from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable


@dataclass(frozen=True)
class Track:
    value: str
    name: str
    topics: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value, "topics": list(self.topics)}


@dataclass(frozen=True)
class TaxonomyRegistry:
    """Conference tracks, their subcategory topics and the cross-cutting themes."""

    tracks: tuple[Track, ...]
    cross_cutting_themes: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_config(cls, tracks: Iterable[dict[str, Any]], themes: Iterable[str] = ()) -> "TaxonomyRegistry":
        return cls(
            tracks=tuple(Track(value=t["value"], name=t["name"], topics=tuple(t["topics"])) for t in tracks),
            cross_cutting_themes=tuple(themes),
        )

    def resolve_track(self, identifier: str | None) -> Track | None:
        # legacy clients send either the stable value or the display name
        if not identifier:
            return None
        for track in self.tracks:
            if identifier == track.value or identifier == track.name:
                return track
        return None

    def is_valid_subcategory(self, track: Track, subcategory: str | None) -> bool:
        return subcategory in track.topics

    def is_valid_theme(self, theme: str) -> bool:
        return theme in self.cross_cutting_themes

    def to_dict(self) -> dict[str, Any]:
        return {
            "tracks": [t.to_dict() for t in self.tracks],
            "crossCuttingThemes": list(self.cross_cutting_themes),
        }


CONFERENCE_TRACKS: list[dict[str, Any]] = [
    {
        "name": "Integrated Diagnostics, AMR, and Epidemic Readiness",
        "value": "track_1",
        "topics": [
            "Optimizing Laboratory Diagnostics in Integrated Health Systems",
            "Quality management systems in Multi-Disease Diagnostics",
            "Leveraging Point-of-Care Testing to Enhance Integrated Service Delivery",
            "Combatting Antimicrobial Resistance (AMR) Through Diagnostics",
            "Strengthening surveillance systems for drug resistance across TB, malaria, HIV, and bacterial infections",
            "Linking diagnostics to resistance monitoring: From lab to real-time policy response",
            "Role of Diagnostics in Early Warning Systems: lessons from recent outbreaks",
            "Expanding access to radiological services: Affordable imaging in low-resource settings",
        ],
    },
    {
        "name": "Digital Health, Data, and Innovation",
        "value": "track_2",
        "topics": [
            "AI-powered diagnostics: Innovations and governance for TB, HIV, and cervical cancer",
            "Digital platforms for surveillance, early detection, and outbreak prediction",
            "Data interoperability and health information exchange: service delivery Integration and "
            "data/information systems, Gaps, ethics, and governance",
            "Community-led digital health: Mobile tools, and digital village health teams (VHTs)",
            "Localized health information systems: Capturing/collection, use of data at grass root and "
            "higher levels for fast action.",
            "Leveraging digital equity in urban and peri-urban health responses",
        ],
    },
    {
        "name": "Community Engagement for Disease Prevention and Elimination",
        "value": "track_3",
        "topics": [
            "Catalyzing youth, community health extension workers (CHEWs), and grassroots champions for "
            "health innovation",
            "Integrating preventive services for communicable and non-communicable diseases, and mental "
            "health at household level",
            "Scaling community-led elimination efforts: Malaria, TB, neglected tropical diseases (NTDs), "
            "and leprosy and improving vaccine uptake",
            "Participatory planning, implementation, monitoring for behavior change, and social accountability",
        ],
    },
    {
        "name": "Health System Resilience and Emergency Preparedness and Response",
        "value": "track_4",
        "topics": [
            "Sepsis and emergency triage protocols in fragile health systems",
            "Strengthening infection prevention and control (IPC) in primary care; including ready to use "
            "isolation facilities.",
            "Local vaccine and therapeutics; access, and emergency stockpiling",
            "Health workforce preparedness; Training multidisciplinary rapid response teams",
            "Continuity of care: Protecting essential health services during crises",
        ],
    },
    {
        "name": "Policy, Financing and Cross-Sector Integration",
        "value": "track_5",
        "topics": [
            "Integrated financing models for chronic and infectious disease burdens",
            "Social determinant-sensitive policymaking: Urban health, empowering young people for improved "
            "health through education and intersectoral action",
            "National accountability frameworks for health performance",
            "Scaling UHC through service integration at the primary level",
            "Policy instruments for embedding health equity in national planning",
            "Implementation science and translation of results into policy",
        ],
    },
    {
        "name": "One Health",
        "value": "track_6",
        "topics": [
            "Early warning systems and multi-sector coordination for zoonotic outbreaks",
            "Localizing One Health strategies: Successes and challenges at district level",
            "Public-private partnerships; Insurance, vouchers, and demand-side financing to reduce "
            "out-of-pocket expenditure",
            "Data harmonization between human and animal health sectors",
            "Nutrition and lifestyle for health",
            "Wildlife trade, food systems, and emerging health risks",
            "Preparing for climate-sensitive disease patterns and spillover threats",
            "Strengthening Biosafety and Biosecurity Systems to Prevent Zoonotic Spillovers",
            "Confronting Insecticide Resistance in Vectors: A One Health approach to sustaining vector "
            "control gains",
        ],
    },
    {
        "name": "Care, Treatment & Rehabilitation",
        "value": "track_7",
        "topics": [
            "Innovations in equitable health services for acute and chronic diseases care delivery across "
            "primary levels",
            "Interface of communicable and non-communicable diseases (NCDs): Integrated models",
            "Role of traditional medicine in continuum of care",
            "Enhancing community trust and treatment adherence through culturally embedded care",
            "Digital decision-support tools for frontline clinicians in NCD and infectious disease management",
        ],
    },
]

CROSS_CUTTING_THEMES: list[str] = [
    "Health equity and inclusion in marginalized and urbanizing populations",
    "Urban health, infrastructure, and health service delivery adaptations",
    "Gender and youth empowerment in policy and practice",
    "Evidence translation from research to policy implementation",
    "South-South collaboration and regional leadership in innovation",
    "Health professionals education including transformative teaching methods and competency-based training",
]


def default_taxonomy() -> TaxonomyRegistry:
    return TaxonomyRegistry.from_config(CONFERENCE_TRACKS, CROSS_CUTTING_THEMES)
