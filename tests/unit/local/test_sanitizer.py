"""Tests for TypeScript annotation stripping."""

import pytest

from qamax_action.local.sanitizer import ANNOTATED_TYPES, strip_type_annotations


def test_removes_type_only_import() -> None:
    """Removes import type declarations including the trailing newline."""
    code = (
        "import type { Page, Locator } from '@playwright/test';\n"
        "const { test } = require('@playwright/test');\n"
    )

    assert strip_type_annotations(code) == (
        "const { test } = require('@playwright/test');\n"
    )


def test_removes_type_import_with_double_quotes_and_no_semicolon() -> None:
    """Handles double-quoted module specifiers without semicolons."""
    code = 'import type { Page } from "@playwright/test"\nconsole.log(1);\n'

    assert strip_type_annotations(code) == "console.log(1);\n"


def test_keeps_value_imports() -> None:
    """Leaves regular imports alone."""
    code = "import { test, expect } from '@playwright/test';\n"

    assert strip_type_annotations(code) == code


@pytest.mark.parametrize("type_name", ANNOTATED_TYPES)
def test_strips_supported_parameter_annotations(type_name: str) -> None:
    """Strips each supported annotation from a parameter."""
    code = f"async function helper(target: {type_name}) {{ return target; }}"

    assert strip_type_annotations(code) == (
        "async function helper(target) { return target; }"
    )


def test_strips_multiple_annotations_on_one_line() -> None:
    """Strips every annotated parameter in a signature."""
    code = "async function login(page : Page, context: BrowserContext) {}"

    assert strip_type_annotations(code) == "async function login(page, context) {}"


def test_does_not_strip_type_name_prefixes() -> None:
    """Does not treat longer identifiers starting with a type name as types."""
    code = "const options = { kind: PageObject, count: 2 };"

    assert strip_type_annotations(code) == code


def test_leaves_unsupported_annotations_untouched() -> None:
    """Annotations outside the supported set pass through unchanged."""
    code = "function total(items: Array<number>): number { return 0; }"

    assert strip_type_annotations(code) == code


def test_is_idempotent() -> None:
    """Applying the transform twice gives the same result as once."""
    code = (
        "import type { Page } from '@playwright/test';\n"
        "import type { Browser } from '@playwright/test';\n"
        "async function open(page: Page, browser: Browser) {\n"
        "  await page.goto('/');\n"
        "}\n"
    )

    once = strip_type_annotations(code)

    assert strip_type_annotations(once) == once


def test_is_idempotent_for_chained_annotations() -> None:
    """Reaches a fixed point even when one rewrite exposes another."""
    code = "let x: Page: Page;"

    once = strip_type_annotations(code)

    assert once == "let x;"
    assert strip_type_annotations(once) == once
