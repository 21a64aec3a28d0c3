"""
Phrase tables and regex pattern strings for the heuristic suggestion scan.
Rules in services/rules.py compile these at import; add or edit entries here to
extend a rule category without touching rule logic.
"""
import re
from typing import Dict, List, Tuple

# Appended to the first sentence of a description that carries no numbers.
METRIC_PLACEHOLDER = " (add specific metrics here)"

METRIC_MIN_LENGTH = 50
METRIC_SNIPPET_MAX_CHARS = 100

# Misspelling -> correction, lowercase. Capitalised variants are derived.
TYPO_CORRECTIONS: Dict[str, str] = {
    "teh": "the",
    "recieve": "receive",
    "recieved": "received",
    "occured": "occurred",
    "seperate": "separate",
    "definate": "definite",
    "managment": "management",
    "developement": "development",
    "experiance": "experience",
    "experinece": "experience",
    "responsable": "responsible",
    "compnay": "company",
    "projcet": "project",
    "skils": "skills",
    "acheived": "achieved",
    "acheivement": "achievement",
    "succesful": "successful",
    "sucessful": "successful",
    "enviroment": "environment",
    "leadreship": "leadership",
    "commited": "committed",
    "accomodate": "accommodate",
}

# Weak phrasing -> strong action verb. Matched case-sensitively as whole words.
WEAK_VERB_REPLACEMENTS: Dict[str, str] = {
    "Responsible for": "Led",
    "responsible for": "led",
    "Worked on": "Developed",
    "worked on": "developed",
    "Helped with": "Supported",
    "helped with": "supported",
    "Assisted with": "Supported",
    "assisted with": "supported",
    "Was in charge of": "Directed",
    "was in charge of": "directed",
    "Participated in": "Contributed to",
    "participated in": "contributed to",
    "Tasked with": "Drove",
    "Duties included": "Delivered",
}

WORDY_PHRASES: Dict[str, str] = {
    "In order to": "To",
    "in order to": "to",
    "due to the fact that": "because",
    "Due to the fact that": "Because",
    "a large number of": "many",
    "at this point in time": "now",
    "has the ability to": "can",
    "have the ability to": "can",
    "for the purpose of": "to",
    "in the event that": "if",
    "with regard to": "regarding",
    "on a daily basis": "daily",
    "utilized": "used",
    "utilize": "use",
}

# Informal -> formal. Matched case-insensitively as whole words.
INFORMAL_PHRASES: Dict[str, str] = {
    "stuff": "materials",
    "things": "tasks",
    "kinda": "somewhat",
    "sorta": "somewhat",
    "a lot of": "many",
    "lots of": "many",
    "pretty": "quite",
    "gonna": "going to",
    "wanna": "want to",
    "basically": "essentially",
    "tons of": "numerous",
}

# Count nouns that should be plural after a number >= 2.
COUNT_NOUNS: List[str] = [
    "year",
    "month",
    "week",
    "engineer",
    "developer",
    "member",
    "person",
    "project",
    "client",
    "customer",
    "product",
    "application",
    "team",
    "report",
    "country",
]

# Words that may follow a counted noun. Any other word means the noun is used
# attributively ("5 person team", "3 month project") and is left alone.
COUNT_NOUN_FOLLOWERS: List[str] = [
    "and",
    "or",
    "on",
    "in",
    "at",
    "for",
    "to",
    "of",
    "with",
    "across",
    "from",
    "over",
    "under",
    "per",
    "ago",
    "who",
    "that",
    "which",
]

IRREGULAR_PLURALS: Dict[str, str] = {
    "person": "people",
    "country": "countries",
}

# Passive "was/were <phrase>" -> active replacement for the whole match.
PASSIVE_PHRASES: Dict[str, str] = {
    "responsible for": "led",
    "involved in": "contributed to",
    "tasked with": "drove",
    "charged with": "owned",
    "given the opportunity to": "chose to",
}

PASSIVE_AGENTS: Dict[str, str] = {
    "me": "I",
    "us": "we",
    "my team": "my team",
    "the team": "the team",
    "our team": "our team",
}

MONTH_NAMES: List[str] = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


def with_capitalised_variants(table: Dict[str, str]) -> Dict[str, str]:
    """Return table plus an entry with both sides capitalised for every lowercase key."""
    result: Dict[str, str] = {}
    for wrong, right in table.items():
        result[wrong] = right
        capital = wrong[:1].upper() + wrong[1:]
        if capital != wrong:
            result.setdefault(capital, right[:1].upper() + right[1:])
    return result


def build_phrase_patterns(
    table: Dict[str, str],
    ignore_case: bool = False,
) -> List[Tuple[re.Pattern, str]]:
    """Compile each phrase key into a whole-word pattern, keeping table order."""
    flags = re.I if ignore_case else 0
    result: List[Tuple[re.Pattern, str]] = []
    for phrase, replacement in table.items():
        phrase = phrase.strip()
        if not phrase:
            continue
        result.append((re.compile(r"\b" + re.escape(phrase) + r"\b", flags), replacement))
    return result


def build_month_pattern() -> str:
    """Alternation matching full month names and their three-letter abbreviations."""
    parts = []
    for name in MONTH_NAMES:
        abbr, rest = name[:3], name[3:]
        parts.append(re.escape(abbr) + (f"(?:{re.escape(rest)})?" if rest else "") + r"\.?")
    return "(?:" + "|".join(parts) + ")"
