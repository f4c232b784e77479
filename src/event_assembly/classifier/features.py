"""Features for an ordered pair of event mentions.

Features are plain dicts so they can be fed to a DictVectorizer. String
features are one-hot encoded by the vectorizer; numeric features are kept
as they are.
"""

from __future__ import annotations

from typing import Any

from event_assembly.mentions import Mention
from event_assembly.sieves.cues import cue_names, match_between
from event_assembly.sieves.tense import TenseAspectDetector

MAX_BETWEEN_LEMMAS = 20


def pair_features(
    e1: Mention,
    e2: Mention,
    detector: TenseAspectDetector | None = None,
) -> dict[str, Any]:
    """Lexical, syntactic and positional features for the pair (e1, e2)."""
    detector = detector or TenseAspectDetector()
    features: dict[str, Any] = {
        "label1": e1.label,
        "label2": e2.label,
        "label_pair": f"{e1.label}|{e2.label}",
        "negated1": e1.negated,
        "negated2": e2.negated,
        "hypothesized1": e1.hypothesized,
        "hypothesized2": e2.hypothesized,
        "e1_contains_e2": e1.contains(e2),
        "e2_contains_e1": e2.contains(e1),
    }

    first, second = (e1, e2) if (e1.sentence, e1.start) <= (e2.sentence, e2.start) else (e2, e1)
    features["e1_first"] = first is e1

    same_sentence = e1.document.doc_id == e2.document.doc_id and e1.sentence == e2.sentence
    features["same_sentence"] = same_sentence
    features["sentence_distance"] = float(abs(e2.sentence - e1.sentence))

    if same_sentence:
        sentence = e1.sentence_obj
        features["token_distance"] = float(max(0, second.start - first.end))
        between = range(first.end, min(second.start, first.end + MAX_BETWEEN_LEMMAS))
        for i in between:
            features[f"between={sentence.lemma(i)}"] = 1.0
        if first.end <= second.start:
            for name in cue_names(sentence, first, second):
                features[f"cue={name}"] = 1.0
    else:
        rule = match_between(second.sentence_obj, second)
        if rule is not None:
            features[f"discourse={rule.name}"] = 1.0
        opener = second.sentence_obj.words[:1]
        if opener:
            features["opener"] = opener[0].lower()

    for i, mention in ((1, e1), (2, e2)):
        start, end = mention.trigger_span
        sentence = mention.sentence_obj
        features[f"trigger{i}"] = " ".join(sentence.lemma(j) for j in range(start, end))
        tense_aspect = detector.detect(mention)
        features[f"tense{i}"] = tense_aspect.name if tense_aspect else "none"

    features["tense_pair"] = f"{features['tense1']}|{features['tense2']}"
    return features
