"""PHQ-9 and GAD-7 instrument definitions.

PHQ-9 Scoring:
- 0-4: Minimal depression
- 5-9: Mild depression
- 10-14: Moderate depression
- 15-19: Moderately severe depression
- 20-27: Severe depression

GAD-7 Scoring:
- 0-4: Minimal anxiety
- 5-9: Mild anxiety
- 10-14: Moderate anxiety
- 15-21: Severe anxiety

PHQ-9 item 9 (thoughts of being better off dead or of self-harm) is
handled separately from the bands: any positive answer escalates.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from carecheck.shared.models import Instrument, PHQ9Item

MIN_ANSWER = 0
MAX_ANSWER = 3

RESPONSE_OPTIONS: Tuple[Dict, ...] = (
    {"value": 0, "text": "Not at all"},
    {"value": 1, "text": "Several days"},
    {"value": 2, "text": "More than half the days"},
    {"value": 3, "text": "Nearly every day"},
)

QUESTION_PREFIX = "Over the last 2 weeks, how often have you been bothered by "

PHQ9_ITEMS: Tuple[str, ...] = (
    "little interest or pleasure in doing things?",
    "feeling down, depressed, or hopeless?",
    "trouble falling or staying asleep, or sleeping too much?",
    "feeling tired or having little energy?",
    "poor appetite or overeating?",
    "feeling bad about yourself or that you are a failure or have let "
    "yourself or your family down?",
    "trouble concentrating on things, such as reading the newspaper or "
    "watching television?",
    "moving or speaking so slowly that other people could have noticed? Or "
    "the opposite - being so fidgety or restless that you have been moving "
    "around a lot more than usual?",
    "thoughts that you would be better off dead, or of hurting yourself?",
)

GAD7_ITEMS: Tuple[str, ...] = (
    "feeling nervous, anxious, or on edge?",
    "not being able to stop or control worrying?",
    "worrying too much about different things?",
    "trouble relaxing?",
    "being so restless that it is hard to sit still?",
    "becoming easily annoyed or irritable?",
    "feeling afraid, as if something awful might happen?",
)

# Zero-based index of PHQ-9 item 9
SELF_HARM_INDEX = PHQ9Item.SELF_HARM.value - 1

SELF_HARM_RECOMMENDATION = (
    "⚠️ IMPORTANT: You indicated thoughts of self-harm. Please contact a "
    "crisis helpline or emergency services immediately."
)


@dataclass(frozen=True)
class SeverityBand:
    """Inclusive score range with its fixed guidance."""
    name: str
    low: int
    high: int
    interpretation: str
    recommendations: Tuple[str, ...]
    coping_strategies: Tuple[str, ...] = ()

    def contains(self, score: int) -> bool:
        return self.low <= score <= self.high


@dataclass(frozen=True)
class InstrumentDefinition:
    instrument: Instrument
    items: Tuple[str, ...]
    bands: Tuple[SeverityBand, ...]
    options: Tuple[Dict, ...] = field(default=RESPONSE_OPTIONS)

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def max_score(self) -> int:
        return self.item_count * MAX_ANSWER

    def question(self, step: int) -> str:
        """Question text for a one-based step."""
        return QUESTION_PREFIX + self.items[step - 1]

    def band_for(self, total_score: int) -> SeverityBand:
        for band in self.bands:
            if band.contains(total_score):
                return band
        raise ValueError(f"Score {total_score} outside {self.instrument.value} range")


PHQ9 = InstrumentDefinition(
    instrument=Instrument.PHQ9,
    items=PHQ9_ITEMS,
    bands=(
        SeverityBand(
            name="minimal",
            low=0,
            high=4,
            interpretation=(
                "Minimal depression symptoms. You appear to be experiencing "
                "very few symptoms of depression."
            ),
            recommendations=(
                "Continue with your current self-care practices",
                "Maintain regular exercise and healthy sleep habits",
                "Stay connected with friends and family",
                "Consider mindfulness or meditation practices",
            ),
        ),
        SeverityBand(
            name="mild",
            low=5,
            high=9,
            interpretation=(
                "Mild depression symptoms. You may be experiencing some "
                "symptoms that could benefit from attention."
            ),
            recommendations=(
                "Consider talking to a counsellor or therapist",
                "Increase physical activity and outdoor time",
                "Practice stress management techniques",
                "Maintain social connections and activities you enjoy",
                "Monitor your symptoms and seek help if they worsen",
            ),
        ),
        SeverityBand(
            name="moderate",
            low=10,
            high=14,
            interpretation=(
                "Moderate depression symptoms. Your symptoms are significant "
                "and may be impacting your daily life."
            ),
            recommendations=(
                "Strongly consider professional counselling or therapy",
                "Speak with a healthcare provider about your symptoms",
                "Consider joining a support group",
                "Implement structured self-care routines",
                "Avoid alcohol and drugs as coping mechanisms",
            ),
        ),
        SeverityBand(
            name="moderately_severe",
            low=15,
            high=19,
            interpretation=(
                "Moderately severe depression symptoms. Your symptoms are "
                "quite significant and likely affecting multiple areas of "
                "your life."
            ),
            recommendations=(
                "Seek professional help from a mental health provider immediately",
                "Consider both therapy and medication options",
                "Inform trusted friends or family about your situation",
                "Create a safety plan with professional guidance",
                "Avoid making major life decisions while experiencing these symptoms",
            ),
        ),
        SeverityBand(
            name="severe",
            low=20,
            high=27,
            interpretation=(
                "Severe depression symptoms. You are experiencing significant "
                "symptoms that require immediate professional attention."
            ),
            recommendations=(
                "Seek immediate professional help from a mental health provider",
                "Contact your doctor or a mental health crisis line",
                "Consider intensive treatment options",
                "Ensure you have a strong support system in place",
                "If you have thoughts of self-harm, seek emergency help immediately",
            ),
        ),
    ),
)

GAD7 = InstrumentDefinition(
    instrument=Instrument.GAD7,
    items=GAD7_ITEMS,
    bands=(
        SeverityBand(
            name="minimal",
            low=0,
            high=4,
            interpretation=(
                "Minimal anxiety symptoms. You appear to be experiencing very "
                "few symptoms of anxiety."
            ),
            recommendations=(
                "Continue with your current stress management practices",
                "Maintain regular exercise and relaxation activities",
                "Practice deep breathing or mindfulness when stressed",
                "Keep a healthy work-life balance",
            ),
            coping_strategies=(
                "4-7-8 breathing technique",
                "Progressive muscle relaxation",
                "Regular physical activity",
                "Maintain social connections",
            ),
        ),
        SeverityBand(
            name="mild",
            low=5,
            high=9,
            interpretation=(
                "Mild anxiety symptoms. You may be experiencing some anxiety "
                "that could benefit from attention."
            ),
            recommendations=(
                "Learn and practice relaxation techniques",
                "Consider regular exercise or yoga",
                "Try mindfulness or meditation practices",
                "Limit caffeine and alcohol intake",
                "Talk to someone you trust about your worries",
            ),
            coping_strategies=(
                "Deep breathing exercises",
                "Mindfulness meditation",
                "Regular sleep schedule",
                "Limit news and social media",
                "Grounding techniques (5-4-3-2-1 method)",
            ),
        ),
        SeverityBand(
            name="moderate",
            low=10,
            high=14,
            interpretation=(
                "Moderate anxiety symptoms. Your anxiety levels are significant "
                "and may be impacting your daily functioning."
            ),
            recommendations=(
                "Consider speaking with a counsellor or therapist",
                "Learn cognitive-behavioral techniques for managing anxiety",
                "Practice regular stress-reduction activities",
                "Consider joining an anxiety support group",
                "Speak with a healthcare provider about your symptoms",
            ),
            coping_strategies=(
                "Cognitive restructuring techniques",
                "Scheduled worry time",
                "Regular therapy sessions",
                "Anxiety management apps",
                "Support group participation",
            ),
        ),
        SeverityBand(
            name="severe",
            low=15,
            high=21,
            interpretation=(
                "Severe anxiety symptoms. You are experiencing significant "
                "anxiety that likely requires professional attention."
            ),
            recommendations=(
                "Seek professional help from a mental health provider",
                "Consider both therapy and medication options with a doctor",
                "Learn emergency anxiety management techniques",
                "Inform trusted friends or family about your situation",
                "Avoid self-medicating with alcohol or drugs",
                "Consider intensive treatment if symptoms are overwhelming",
            ),
            coping_strategies=(
                "Professional crisis management plan",
                "Medication compliance if prescribed",
                "Intensive therapy or counseling",
                "Emergency contact list",
                "Hospitalization if necessary",
            ),
        ),
    ),
)

INSTRUMENTS: Dict[Instrument, InstrumentDefinition] = {
    Instrument.PHQ9: PHQ9,
    Instrument.GAD7: GAD7,
}

ANXIETY_ASSOCIATION_LINE = "Anxiety and Depression Association of America: 240-485-1001"


def band_names(instrument: Instrument) -> List[str]:
    return [band.name for band in INSTRUMENTS[instrument].bands]
