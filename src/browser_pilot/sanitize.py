# sanitize.py
# Reduces raw page markup to what the model needs to pick selectors.

from bs4 import BeautifulSoup

TAGS_TO_REMOVE = (
    "script",
    "style",
    "aside",
    "footer",
    "header",
    "hgroup",
    "nav",
    "search",
)

ATTRIBUTES_TO_KEEP = frozenset(
    {
        "id",
        "name",
        "href",
        "src",
        "alt",
        "title",
        "aria-label",
        "jsname",
    }
)


def sanitize_html(markup: str) -> str:
    """Strip non-essential elements and attributes, then pretty-print."""
    if not markup:
        return ""
    soup = BeautifulSoup(markup, "html.parser")

    for tag in soup.find_all(TAGS_TO_REMOVE):
        # Nested removals are already gone with their parent.
        if tag.decomposed:
            continue
        tag.decompose()

    for element in soup.find_all(True):
        element.attrs = {k: v for k, v in element.attrs.items() if k in ATTRIBUTES_TO_KEEP}

    return soup.prettify()
