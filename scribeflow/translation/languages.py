"""Target languages offered for translation, keyed by display name."""

LANGUAGES = {
    "Arabic": "arb_Arab",
    "Bengali": "ben_Beng",
    "Chinese (Simplified)": "zho_Hans",
    "Chinese (Traditional)": "zho_Hant",
    "Dutch": "nld_Latn",
    "English": "eng_Latn",
    "French": "fra_Latn",
    "German": "deu_Latn",
    "Greek": "ell_Grek",
    "Hebrew": "heb_Hebr",
    "Hindi": "hin_Deva",
    "Indonesian": "ind_Latn",
    "Italian": "ita_Latn",
    "Japanese": "jpn_Jpan",
    "Korean": "kor_Hang",
    "Polish": "pol_Latn",
    "Portuguese": "por_Latn",
    "Russian": "rus_Cyrl",
    "Spanish": "spa_Latn",
    "Swahili": "swh_Latn",
    "Swedish": "swe_Latn",
    "Thai": "tha_Thai",
    "Turkish": "tur_Latn",
    "Ukrainian": "ukr_Cyrl",
    "Vietnamese": "vie_Latn",
}

LANGUAGE_CODES = frozenset(LANGUAGES.values())


def resolve_language(name_or_code: str) -> str:
    """Map a display name (case-insensitive) or a known code to its code.

    Raises:
        ValueError: If the language is not offered
    """
    if name_or_code in LANGUAGE_CODES:
        return name_or_code
    for name, code in LANGUAGES.items():
        if name.lower() == name_or_code.strip().lower():
            return code
    raise ValueError(f"Unsupported language: {name_or_code}")
