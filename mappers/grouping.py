"""
Unmapped Label Grouping
Clusters labels that no existing category claims into proposed new categories.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from itertools import combinations
from typing import List, Sequence, Tuple

from config import GROUPING_THRESHOLD
from mappers.models import CategoryKind, UnmappedLabel
from utils.similarity import similarity_score
from utils.synonyms import label_hits_entry, synonyms_for


@dataclass(frozen=True)
class LabelGroup:
    standardized_name: str
    labels: Tuple[UnmappedLabel, ...]
    confidence: float

    @property
    def vendors(self):
        return sorted({label.vendor for label in self.labels})


def generate_standardized_name(names: Sequence[str], kind=CategoryKind.SPECIALTY) -> str:
    """
    Propose a canonical name from a group of raw labels.
    Uses the shortest label, special characters replaced by spaces.
    Non-column labels are title-cased ("CARDIOLOGY" -> "Cardiology").
    """
    if not names:
        return ""
    shortest = min(names, key=len)
    cleaned = re.sub(r'[^a-zA-Z0-9\s]', ' ', shortest)
    cleaned = re.sub(r'\s+', ' ', cleaned).strip()
    if CategoryKind(kind) == CategoryKind.COLUMN:
        return cleaned
    return ' '.join(word[:1].upper() + word[1:].lower() for word in cleaned.split(' '))


def _synonym_keys(label, table):
    return {key for key, synonyms in table.items() if label_hits_entry(label, key, synonyms)}


def group_unmapped_labels(labels: Sequence[UnmappedLabel], threshold: float = GROUPING_THRESHOLD,
                          kind=CategoryKind.SPECIALTY, scorer=similarity_score) -> List[LabelGroup]:
    """
    Greedily group similar unmapped labels.

    Each ungrouped label seeds a group and pulls in every later label that
    either scores >= threshold against the seed or hits the same synonym
    entry.

    Returns:
        Groups sorted by confidence (mean pairwise similarity, 1.0 for a
        single label), highest first
    """
    table = synonyms_for(kind)
    keys = [_synonym_keys(label.name, table) for label in labels]
    used = set()
    groups = []

    for i, seed in enumerate(labels):
        if i in used:
            continue
        used.add(i)
        members = [seed]
        for j in range(i + 1, len(labels)):
            if j in used:
                continue
            candidate = labels[j]
            if (scorer(seed.name, candidate.name, seed.data_type, candidate.data_type) >= threshold
                    or keys[i] & keys[j]):
                members.append(candidate)
                used.add(j)

        pairs = list(combinations(members, 2))
        if pairs:
            confidence = sum(scorer(a.name, b.name, a.data_type, b.data_type) for a, b in pairs) / len(pairs)
        else:
            confidence = 1.0

        groups.append(LabelGroup(
            standardized_name=generate_standardized_name([m.name for m in members], kind),
            labels=tuple(members),
            confidence=confidence,
        ))

    return sorted(groups, key=lambda g: g.confidence, reverse=True)
