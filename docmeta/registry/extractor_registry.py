from docmeta.extractors.react_extractor import ReactComponentExtractor

LANGUAGE_PARSER_OPTIONS = {
    "javascript": {},
    "typescript": {},
    "flow": {"flow": True},
}


def get_extractor(language: str, options: dict = None):
    lang = language.lower()
    if lang not in LANGUAGE_PARSER_OPTIONS:
        raise ValueError(f"No extractor for language: {language}")
    options = dict(options or {})
    parser_options = dict(LANGUAGE_PARSER_OPTIONS[lang])
    parser_options.update(options.get("parser_options") or {})
    options["parser_options"] = parser_options
    return ReactComponentExtractor(options)
