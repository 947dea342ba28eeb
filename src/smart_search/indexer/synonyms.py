"""Fixed synonym and emotion tables used for semantic query expansion."""

SYNONYMS: dict[str, list[str]] = {
    "title": ["headline", "heading", "header", "subject"],
    "headline": ["title", "heading", "header", "subject"],
    "article": ["post", "content", "piece", "writing"],
    "content": ["article", "post", "text", "material"],
    "note": ["document", "entry", "record"],
    "write": ["compose", "author", "create", "draft"],
    "create": ["make", "produce", "generate", "write"],
    "good": ["great", "excellent", "effective", "powerful"],
    "idea": ["concept", "thought", "insight", "notion"],
}

EMOTION_CLUSTERS: dict[str, list[str]] = {
    "anger": ["rage", "fury", "pissed-off", "angry", "mad", "irritated"],
    "fear": ["anxiety", "anxious", "scared", "terrified", "worried"],
    "joy": ["happy", "joyous", "play", "playful", "excited", "enthusiastic"],
    "sadness": ["sad", "lonely", "panic", "depressed", "melancholy"],
    "love": ["care", "tender", "loving", "affection", "attachment"],
    "desire": ["lust", "horny", "wanting", "craving", "yearning"],
}


def synonyms_for(term: str) -> list[str]:
    """Return the general synonyms of a term, or an empty list."""
    return list(SYNONYMS.get(term.strip().lower(), []))


def emotion_cluster_for(term: str) -> list[str]:
    """Return the emotion cluster (key first, then members) containing a term."""
    lower_term = term.strip().lower()
    for emotion, members in EMOTION_CLUSTERS.items():
        if lower_term == emotion or lower_term in members:
            return [emotion, *members]
    return []


def related_terms(term: str) -> list[str]:
    """
    Return every term related to ``term`` through the fixed tables.

    The synonym entry contributes the term and its synonyms; a matching emotion
    cluster contributes its key and all members. Order is first-seen and
    duplicates are removed. Unknown terms yield an empty list.
    """
    lower_term = term.strip().lower()
    related: list[str] = []

    synonyms = synonyms_for(lower_term)
    if synonyms:
        related.append(lower_term)
        related.extend(synonyms)
    related.extend(emotion_cluster_for(lower_term))

    return list(dict.fromkeys(related))
