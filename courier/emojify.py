"""Read-time translation of ``:emoji_code:`` shortcodes to Unicode."""

from typing import Optional

import emoji


def translate(text: Optional[str]) -> Optional[str]:
    """Replace shortcodes such as ``:smile:`` or ``:thumbs_up:`` in *text*.

    Both GitHub-style aliases and CLDR names are understood.  ``None`` passes
    through so absent fields stay absent.
    """
    if not text:
        return text
    return emoji.emojize(text, language="alias")
