"""
Question Flow Data (v2)

Fast where trivial, deep where it matters:
- Basics: age + gender + units on one screen, height + weight on the next
- Experience: one tap
- Goals: multi-select (up to 2), then each goal's branch in selection order
- Injuries: gate -> body areas -> pain triggers per area -> notes -> custom
- Equipment, schedule, recovery: one or two taps each
- Preferences: optional

Healthy user: ~12 questions. User with injuries: ~18 questions.
"""

from .questionnaire import (
    GOAL_BRANCH,
    INJURY_CHAIN,
    TERMINAL,
    BranchRule,
    Category,
    FlowGraph,
    LiteralEdge,
    Question,
    QuestionOption,
    QuestionType,
    ShowWhen,
    SubField,
)


FLOW_VERSION = "2.0.0"

CATEGORIES = (
    Category("basics", "About You"),
    Category("experience", "Experience"),
    Category("goals", "Your Goals"),
    Category("goal-details", "Goal Details"),
    Category("constraints", "Injuries & Limitations"),
    Category("equipment", "Equipment"),
    Category("schedule", "Schedule"),
    Category("recovery", "Recovery"),
    Category("preferences", "Preferences"),
)


def _options(*pairs) -> tuple[QuestionOption, ...]:
    return tuple(QuestionOption(*p) for p in pairs)


# =============================================================================
# BASICS
# =============================================================================

BASICS_INFO = Question(
    id="basics-info",
    category="basics",
    title="Let's start with the basics",
    subtitle="Used for recovery guidelines and volume calibration.",
    type=QuestionType.MULTI_FIELD,
    fields=(
        SubField(
            id="age", label="Age", type=QuestionType.NUMBER_INPUT,
            placeholder="e.g., 28", unit="years", min=14, max=80, required=True,
        ),
        SubField(
            id="gender", label="Gender", type=QuestionType.SINGLE_SELECT,
            options=_options(
                ("male", "Male"),
                ("female", "Female"),
                ("non-binary", "Non-binary"),
                ("prefer-not", "Prefer not to say"),
            ),
            required=True,
        ),
        SubField(
            id="unit-preference", label="Units", type=QuestionType.SINGLE_SELECT,
            options=_options(
                ("imperial", "Imperial (lbs, ft/in)"),
                ("metric", "Metric (kg, cm)"),
            ),
            required=True,
        ),
    ),
    required=True,
    default_next=LiteralEdge("body-measurements"),
)

BODY_MEASUREMENTS = Question(
    id="body-measurements",
    category="basics",
    title="Height & Weight",
    type=QuestionType.MULTI_FIELD,
    fields=(
        SubField(
            id="height-feet", label="Height (ft)", type=QuestionType.NUMBER_INPUT,
            placeholder="e.g., 5", unit="ft", min=3, max=8, required=True,
            show_when=ShowWhen("unit-preference", "imperial"),
        ),
        SubField(
            id="height-inches", label="Height (in)", type=QuestionType.NUMBER_INPUT,
            placeholder="e.g., 10", unit="in", min=0, max=11, required=True,
            show_when=ShowWhen("unit-preference", "imperial"),
        ),
        SubField(
            id="height", label="Height", type=QuestionType.NUMBER_INPUT,
            placeholder="e.g., 178", unit="cm", min=100, max=230, required=True,
            show_when=ShowWhen("unit-preference", "metric"),
        ),
        SubField(
            id="weight", label="Weight", type=QuestionType.NUMBER_INPUT,
            placeholder="e.g., 185", unit="lbs", min=30, max=500, required=True,
            variants={
                "imperial": {"unit": "lbs", "placeholder": "e.g., 185", "max": 500},
                "metric": {"unit": "kg", "placeholder": "e.g., 84", "max": 250},
            },
        ),
    ),
    required=True,
    default_next=LiteralEdge("experience-level"),
)


# =============================================================================
# EXPERIENCE
# =============================================================================

EXPERIENCE_LEVEL = Question(
    id="experience-level",
    category="experience",
    title="Training experience?",
    subtitle="Be honest. Controls exercise complexity and volume.",
    type=QuestionType.SINGLE_SELECT,
    auto_advance=True,
    options=_options(
        ("beginner", "Beginner", "Under 1 year consistent training"),
        ("intermediate", "Intermediate", "1-5 years consistent training"),
        ("advanced", "Advanced", "5+ years structured progressive overload"),
    ),
    required=True,
    default_next=LiteralEdge("primary-goal"),
)


# =============================================================================
# GOALS (branch in selection order)
# =============================================================================

PRIMARY_GOAL = Question(
    id="primary-goal",
    category="goals",
    title="What are your goals?",
    subtitle="Pick up to 2. We'll tailor your program to both.",
    type=QuestionType.MULTI_SELECT,
    min_selections=1,
    max_selections=2,
    options=_options(
        ("bodybuilding", "Bodybuilding", "Build muscle, improve aesthetics"),
        ("powerlifting", "Powerlifting", "Maximize squat, bench, deadlift"),
        ("athleticism", "Athleticism", "Sport performance, speed, power"),
    ),
    required=True,
    default_next=GOAL_BRANCH,
)

# -- Bodybuilding branch --

TARGET_MUSCLES = Question(
    id="target-muscles",
    category="goal-details",
    title="Priority muscle groups?",
    subtitle="Up to 3. These get extra volume.",
    type=QuestionType.MULTI_SELECT,
    min_selections=1,
    max_selections=3,
    options=_options(
        ("chest", "Chest"),
        ("back", "Back / Lats"),
        ("shoulders", "Shoulders"),
        ("arms", "Arms"),
        ("legs", "Legs"),
        ("glutes", "Glutes"),
        ("core", "Core"),
    ),
    required=True,
    default_next=LiteralEdge("split-preference"),
)

SPLIT_PREFERENCE = Question(
    id="split-preference",
    category="goal-details",
    title="Preferred training split?",
    type=QuestionType.SINGLE_SELECT,
    auto_advance=True,
    options=_options(
        ("push-pull-legs", "Push / Pull / Legs"),
        ("upper-lower", "Upper / Lower"),
        ("bro-split", "Body Part Split"),
        ("full-body", "Full Body"),
        ("auto", "Choose for me"),
    ),
    required=True,
    default_next=GOAL_BRANCH,
)

# -- Powerlifting branch --

MAX_LIFTS = Question(
    id="max-lifts",
    category="goal-details",
    title="Current 1-rep maxes?",
    subtitle="0 if unknown. Used to program intensity.",
    type=QuestionType.MULTI_FIELD,
    fields=(
        SubField(
            id="max-squat", label="Squat", type=QuestionType.NUMBER_INPUT,
            placeholder="0", unit="lbs", min=0, max=1100, required=True,
            variants={
                "imperial": {"unit": "lbs", "placeholder": "0", "max": 1100},
                "metric": {"unit": "kg", "placeholder": "0", "max": 500},
            },
        ),
        SubField(
            id="max-bench", label="Bench Press", type=QuestionType.NUMBER_INPUT,
            placeholder="0", unit="lbs", min=0, max=770, required=True,
            variants={
                "imperial": {"unit": "lbs", "placeholder": "0", "max": 770},
                "metric": {"unit": "kg", "placeholder": "0", "max": 350},
            },
        ),
        SubField(
            id="max-deadlift", label="Deadlift", type=QuestionType.NUMBER_INPUT,
            placeholder="0", unit="lbs", min=0, max=1100, required=True,
            variants={
                "imperial": {"unit": "lbs", "placeholder": "0", "max": 1100},
                "metric": {"unit": "kg", "placeholder": "0", "max": 500},
            },
        ),
    ),
    required=True,
    default_next=LiteralEdge("competition-goal"),
)

COMPETITION_GOAL = Question(
    id="competition-goal",
    category="goal-details",
    title="Training for competition?",
    type=QuestionType.SINGLE_SELECT,
    auto_advance=True,
    options=_options(
        ("no-comp", "No, just getting stronger"),
        ("future-comp", "Considering it"),
        ("upcoming-comp", "Yes, within 6 months"),
        ("active-competitor", "Active competitor"),
    ),
    required=True,
    default_next=LiteralEdge("weak-points"),
)

WEAK_POINTS = Question(
    id="weak-points",
    category="goal-details",
    title="Sticking points?",
    subtitle="Select all. We add targeted accessories.",
    type=QuestionType.MULTI_SELECT,
    options=_options(
        ("squat-depth", "Squat: out of the hole"),
        ("squat-lockout", "Squat: lockout"),
        ("bench-off-chest", "Bench: off the chest"),
        ("bench-lockout", "Bench: lockout"),
        ("deadlift-floor", "Deadlift: off the floor"),
        ("deadlift-lockout", "Deadlift: lockout"),
        ("grip", "Grip strength"),
        ("bracing", "Core bracing"),
    ),
    required=False,
    default_next=GOAL_BRANCH,
)

# -- Athleticism branch --

SPORT = Question(
    id="sport",
    category="goal-details",
    title="What sport?",
    type=QuestionType.SINGLE_SELECT,
    auto_advance=True,
    options=_options(
        ("basketball", "Basketball"),
        ("football", "Soccer"),
        ("american-football", "American Football"),
        ("mma", "MMA / Combat Sports"),
        ("running", "Running / Track"),
        ("swimming", "Swimming"),
        ("crossfit", "CrossFit"),
        ("general", "General Performance"),
    ),
    required=True,
    default_next=LiteralEdge("performance-goals"),
)

PERFORMANCE_GOALS = Question(
    id="performance-goals",
    category="goal-details",
    title="Performance priorities?",
    subtitle="Up to 3.",
    type=QuestionType.MULTI_SELECT,
    min_selections=1,
    max_selections=3,
    options=_options(
        ("speed", "Speed"),
        ("power", "Explosive Power"),
        ("agility", "Agility"),
        ("endurance", "Endurance"),
        ("strength", "Max Strength"),
        ("flexibility", "Mobility"),
        ("vertical-jump", "Vertical Jump"),
    ),
    required=True,
    default_next=GOAL_BRANCH,
)


# =============================================================================
# INJURIES (gate -> areas -> synthesized pain triggers -> notes -> custom)
# =============================================================================

INJURY_GATE = Question(
    id="injury-gate",
    category="constraints",
    title="Any injuries or physical limitations?",
    subtitle="Your plan is built around these. Be thorough.",
    type=QuestionType.SINGLE_SELECT,
    options=_options(
        ("none", "No injuries or limitations"),
        ("yes", "Yes, I have injuries/limitations"),
    ),
    required=True,
    branches=(
        BranchRule(condition="none", next_question_id="gym-access"),
        BranchRule(condition="yes", next_question_id="injury-areas"),
    ),
    default_next=LiteralEdge("gym-access"),
)

INJURY_AREAS = Question(
    id="injury-areas",
    category="constraints",
    title="Select all affected areas",
    subtitle="We'll ask specific follow-ups for each one.",
    type=QuestionType.INJURY_SELECTOR,
    options=_options(
        ("lumbar-spine", "Lower Back / Lumbar Spine"),
        ("rotator-cuff", "Shoulder / Rotator Cuff"),
        ("patellar-tendon", "Knee / Patellar Tendon"),
        ("hip-impingement", "Hip Impingement"),
        ("wrist-pain", "Wrist / Hand"),
        ("elbow", "Elbow / Tennis Elbow"),
        ("ankle", "Ankle / Foot"),
        ("neck", "Neck / Cervical"),
        ("thoracic", "Upper Back / Thoracic"),
        ("groin-adductor", "Groin / Adductor"),
    ),
    required=True,
    min_selections=1,
    default_next=INJURY_CHAIN,
)

INJURY_NOTES = Question(
    id="injury-notes",
    category="constraints",
    title="Anything else about your injuries?",
    subtitle="Past surgeries, doctor restrictions, specific movements that hurt...",
    type=QuestionType.TEXT_INPUT,
    placeholder="e.g., \"Torn rotator cuff surgery 2 years ago, still can't press overhead\"",
    required=False,
    default_next=LiteralEdge("additional-limitations"),
)

ADDITIONAL_LIMITATIONS = Question(
    id="additional-limitations",
    category="constraints",
    title="Other limitations to consider?",
    subtitle="Add as many as needed.",
    type=QuestionType.MULTI_TEXT_ADD,
    placeholder="e.g., \"No impact exercises\", \"Bad balance on left side\"",
    required=False,
    default_next=LiteralEdge("gym-access"),
)


# =============================================================================
# EQUIPMENT
# =============================================================================

GYM_ACCESS = Question(
    id="gym-access",
    category="equipment",
    title="Where do you train?",
    type=QuestionType.SINGLE_SELECT,
    auto_advance=True,
    options=_options(
        ("full-gym", "Full Gym", "All equipment available"),
        ("home-gym", "Home Gym"),
        ("minimal", "Minimal Equipment"),
        ("mixed", "Mix (Gym + Home)"),
    ),
    required=True,
    branches=(
        BranchRule(condition="full-gym", next_question_id="days-per-week"),
    ),
    default_next=LiteralEdge("available-equipment"),
)

AVAILABLE_EQUIPMENT = Question(
    id="available-equipment",
    category="equipment",
    title="What equipment do you have?",
    type=QuestionType.MULTI_SELECT,
    options=_options(
        ("dumbbells", "Dumbbells"),
        ("barbell", "Barbell + Plates"),
        ("squat-rack", "Squat Rack"),
        ("bench", "Adjustable Bench"),
        ("pull-up-bar", "Pull-up Bar"),
        ("cables", "Cable Machine"),
        ("kettlebells", "Kettlebells"),
        ("resistance-bands", "Resistance Bands"),
        ("bodyweight", "Bodyweight Only"),
    ),
    required=True,
    default_next=LiteralEdge("days-per-week"),
)


# =============================================================================
# SCHEDULE
# =============================================================================

DAYS_PER_WEEK = Question(
    id="days-per-week",
    category="schedule",
    title="Training days per week?",
    subtitle="Consistency > volume.",
    type=QuestionType.SINGLE_SELECT,
    auto_advance=True,
    options=_options(
        ("2", "2 days"),
        ("3", "3 days"),
        ("4", "4 days"),
        ("5", "5 days"),
        ("6", "6 days"),
    ),
    required=True,
    default_next=LiteralEdge("minutes-per-session"),
)

MINUTES_PER_SESSION = Question(
    id="minutes-per-session",
    category="schedule",
    title="Session length?",
    type=QuestionType.SINGLE_SELECT,
    auto_advance=True,
    options=_options(
        ("30", "30 min"),
        ("45", "45 min"),
        ("60", "60 min"),
        ("75", "75 min"),
        ("90", "90+ min"),
    ),
    required=True,
    default_next=LiteralEdge("sleep-quality"),
)


# =============================================================================
# RECOVERY & STRESS (feeds volume calibration)
# =============================================================================

SLEEP_QUALITY = Question(
    id="sleep-quality",
    category="recovery",
    title="How's your sleep?",
    subtitle="Directly affects recovery capacity and volume prescription.",
    type=QuestionType.SINGLE_SELECT,
    auto_advance=True,
    options=_options(
        ("poor", "Poor (< 6 hours)", "Inconsistent or insufficient"),
        ("moderate", "Moderate (6-7 hours)"),
        ("good", "Good (7-9 hours)", "Consistent and restful"),
    ),
    required=True,
    default_next=LiteralEdge("stress-level"),
)

STRESS_LEVEL = Question(
    id="stress-level",
    category="recovery",
    title="Current life stress?",
    subtitle="High stress = reduced volume. Plan adapts.",
    type=QuestionType.SINGLE_SELECT,
    auto_advance=True,
    options=_options(
        ("low", "Low", "Stable, manageable"),
        ("moderate", "Moderate", "Some pressure"),
        ("high", "High", "Major stressors active"),
    ),
    required=True,
    default_next=LiteralEdge("exercise-likes"),
)


# =============================================================================
# PREFERENCES (optional)
# =============================================================================

EXERCISE_LIKES = Question(
    id="exercise-likes",
    category="preferences",
    title="Exercises you enjoy?",
    subtitle="Optional.",
    type=QuestionType.MULTI_SELECT,
    options=_options(
        ("squats", "Squats"),
        ("deadlifts", "Deadlifts"),
        ("bench-press", "Bench Press"),
        ("pull-ups", "Pull-ups"),
        ("overhead-press", "Overhead Press"),
        ("rows", "Rows"),
        ("lunges", "Lunges"),
        ("curls", "Curls"),
        ("hip-thrusts", "Hip Thrusts"),
    ),
    required=False,
    default_next=LiteralEdge("exercise-dislikes"),
)

EXERCISE_DISLIKES = Question(
    id="exercise-dislikes",
    category="preferences",
    title="Exercises to avoid?",
    subtitle="Optional.",
    type=QuestionType.MULTI_SELECT,
    options=_options(
        ("squats", "Squats"),
        ("deadlifts", "Deadlifts"),
        ("bench-press", "Bench Press"),
        ("pull-ups", "Pull-ups"),
        ("burpees", "Burpees"),
        ("running", "Running"),
        ("planks", "Planks"),
    ),
    required=False,
    default_next=TERMINAL,
)


ALL_QUESTIONS = [
    BASICS_INFO,
    BODY_MEASUREMENTS,
    EXPERIENCE_LEVEL,
    PRIMARY_GOAL,
    TARGET_MUSCLES,
    SPLIT_PREFERENCE,
    MAX_LIFTS,
    COMPETITION_GOAL,
    WEAK_POINTS,
    SPORT,
    PERFORMANCE_GOALS,
    INJURY_GATE,
    INJURY_AREAS,
    INJURY_NOTES,
    ADDITIONAL_LIMITATIONS,
    GYM_ACCESS,
    AVAILABLE_EQUIPMENT,
    DAYS_PER_WEEK,
    MINUTES_PER_SESSION,
    SLEEP_QUALITY,
    STRESS_LEVEL,
    EXERCISE_LIKES,
    EXERCISE_DISLIKES,
]


def build_question_flow() -> FlowGraph:
    """Build and validate the shipped question flow."""
    return FlowGraph(
        version=FLOW_VERSION,
        start_id=BASICS_INFO.id,
        questions={q.id: q for q in ALL_QUESTIONS},
        categories=CATEGORIES,
        goal_question_id=PRIMARY_GOAL.id,
        goal_entries={
            "bodybuilding": TARGET_MUSCLES.id,
            "powerlifting": MAX_LIFTS.id,
            "athleticism": SPORT.id,
        },
        post_goals_id=INJURY_GATE.id,
        injury_gate_id=INJURY_GATE.id,
        injury_question_id=INJURY_AREAS.id,
        post_injury_id=INJURY_NOTES.id,
    ).validate()


QUESTION_FLOW = build_question_flow()
