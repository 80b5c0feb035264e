"""Strip TypeScript type annotations from embedded Playwright scripts.

Embedded scripts are authored in TypeScript but run as plain ``.spec.js``
files. This is a textual rewrite, not a parser. Supported forms:

* type-only imports: ``import type { Page } from '@playwright/test';``
* parameter or variable annotations using one of ``ANNOTATED_TYPES``,
  e.g. ``async (page: Page) => ...`` becomes ``async (page) => ...``

Anything else (generics, unions, interfaces, ``as`` casts, other type names)
is left untouched and will surface as a syntax error in the test run.
"""

import re

ANNOTATED_TYPES = (
    "Page",
    "BrowserContext",
    "Browser",
    "Locator",
    "FrameLocator",
    "APIRequestContext",
)

TYPE_IMPORT_RE = re.compile(
    r"import\s+type\s+\{[^}]*\}\s+from\s+['\"][^'\"]*['\"];?\s*"
)
TYPE_ANNOTATION_RE = re.compile(
    r"(\w+)\s*:\s*(?:" + "|".join(ANNOTATED_TYPES) + r")\b"
)


def strip_type_annotations(code: str) -> str:
    """Return ``code`` with supported type annotations removed.

    Rewrites are repeated until the text stops changing, so applying the
    function to its own output is a no-op.
    """
    while True:
        stripped = TYPE_IMPORT_RE.sub("", code)
        stripped = TYPE_ANNOTATION_RE.sub(r"\1", stripped)
        if stripped == code:
            return stripped
        code = stripped
