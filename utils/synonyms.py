"""
Synonym tables for canonical survey categories
Known vendor spellings and abbreviations, keyed by category kind and canonical name
"""

import re

from mappers.models import CategoryKind


SPECIALTY_SYNONYMS = {
    'cardiology': frozenset({'heart', 'cardiac', 'cardiovascular'}),
    'orthopedics': frozenset({'ortho', 'orthopedic', 'orthopaedic'}),
    'pediatrics': frozenset({'peds', 'pediatric', 'children'}),
    'critical care': frozenset({
        'intensivist', 'critical care medicine', 'critical care/intensivist',
        'intensive care', 'cc medicine', 'cc/intensivist', 'icu',
    }),
    'emergency medicine': frozenset({'emergency', 'er', 'ed'}),
    'internal medicine': frozenset({'internist', 'internal med'}),
    'obstetrics': frozenset({'ob/gyn', 'obgyn', 'obstetrics and gynecology', 'obstetrics & gynecology'}),
    'anesthesiology': frozenset({'anesthesia', 'anesthetist'}),
    'family medicine': frozenset({'family practice', 'family physician', 'family med'}),
    'neurology': frozenset({'neurological', 'neuro'}),
    'psychiatry': frozenset({'psychiatric', 'mental health'}),
    'radiology': frozenset({'radiologist', 'imaging', 'diagnostic radiology'}),
    'surgery': frozenset({'surgeon', 'surgical'}),
}

PROVIDER_TYPE_SYNONYMS = {
    'physician': frozenset({'md', 'do', 'phys', 'doctor', 'staff physician'}),
    'app': frozenset({
        'advanced practice', 'advanced practice provider', 'nurse practitioner',
        'physician assistant', 'np', 'pa', 'crna',
    }),
}

REGION_SYNONYMS = {
    'northeast': frozenset({'ne', 'eastern', 'northeastern', 'east'}),
    'south': frozenset({'se', 'southern', 'southeast', 'southeastern'}),
    'midwest': frozenset({'nc', 'midwestern', 'north central'}),
    'west': frozenset({'western', 'southwest', 'northwest', 'pacific'}),
    'national': frozenset({'all', 'national total', 'us', 'nationwide'}),
}

COLUMN_SYNONYMS = {
    'tcc': frozenset({'total cash', 'total cash compensation', 'total compensation', 'compensation', 'salary'}),
    'wrvu': frozenset({'work rvu', 'work rvus', 'rvu', 'relative value', 'work relative value'}),
    'cf': frozenset({'conversion', 'conversion factor', 'comp per wrvu', 'tcc per wrvu'}),
    'n_orgs': frozenset({'orgs', 'organizations', 'number of organizations', 'org count'}),
    'n_incumbents': frozenset({'incumbents', 'providers', 'number of incumbents', 'incumbent count'}),
    'specialty': frozenset({'specialty name', 'department'}),
    'provider_type': frozenset({'provider type', 'providertype'}),
    'geographic_region': frozenset({'region', 'geographic region', 'geo region', 'area'}),
}

SYNONYM_TABLES = {
    CategoryKind.SPECIALTY: SPECIALTY_SYNONYMS,
    CategoryKind.PROVIDER_TYPE: PROVIDER_TYPE_SYNONYMS,
    CategoryKind.REGION: REGION_SYNONYMS,
    CategoryKind.COLUMN: COLUMN_SYNONYMS,
}

# Words shared by too many specialties to count as a partial hit on their own
GENERIC_TOKENS = frozenset({
    'of', 'the', 'and', 'for', 'in', 'at', 'an',
    'medicine', 'medical', 'care', 'disease', 'diseases', 'general', 'services', 'total',
})

_TOKEN_SPLIT = re.compile(r'[\s\W_]+')
_WHITESPACE = re.compile(r'\s+')


def synonyms_for(kind):
    """Return the synonym table for a category kind (empty dict if none)."""
    return SYNONYM_TABLES.get(CategoryKind(kind), {})


def normalize_phrase(text):
    """Lowercase and collapse whitespace, keeping punctuation such as 'ob/gyn'."""
    if text is None:
        return ""
    return _WHITESPACE.sub(' ', str(text).lower()).strip()


def tokenize(label):
    """Split a label into lowercase tokens on whitespace and non-word characters."""
    return [token for token in _TOKEN_SPLIT.split(normalize_phrase(label)) if token]


def keys_for_category(standardized_name, table):
    """
    Find the synonym entries that describe a canonical category.

    An entry belongs to the category when the category name mentions the
    key or one of its synonyms as whole tokens, so "Cardiovascular Disease"
    and "Pediatric Cardiology" both carry the cardiology entry while
    "Family Medicine" does not pick up "family med". Percentile-suffixed
    columns ("tcc_p50") are kept apart by the caller's digit-run check.
    """
    name_tokens = ' '.join(tokenize(standardized_name))
    matched = []
    for key, synonyms in table.items():
        terms = (key,) + tuple(sorted(synonyms))
        if any(_contains_phrase(name_tokens, ' '.join(tokenize(term))) for term in terms):
            matched.append(key)
    return matched


def label_hits_entry(label, key, synonyms, min_substring_length=3):
    """
    Check whether a label points at a synonym entry.

    True when any label token is one of the synonyms, a multi-word synonym
    appears in the label, or a token is a substring of the key (or the key of
    the token). Tokens shorter than min_substring_length, and generic words
    like "medicine", only count through exact synonym hits.
    """
    phrase = normalize_phrase(label)
    tokens = tokenize(label)
    if not tokens:
        return False

    joined = ' '.join(tokens)
    for synonym in synonyms:
        if synonym in tokens:
            return True
        if ' ' in synonym or '/' in synonym or '&' in synonym:
            if synonym in phrase or _contains_phrase(joined, ' '.join(tokenize(synonym))):
                return True

    key_text = key.replace('_', ' ')
    for token in tokens:
        if len(token) < min_substring_length or token in GENERIC_TOKENS:
            continue
        if token in key_text or key_text in token:
            return True
    return False


def _contains_phrase(text, phrase):
    """Whole-token phrase containment."""
    if not phrase:
        return False
    return f' {phrase} ' in f' {text} '
