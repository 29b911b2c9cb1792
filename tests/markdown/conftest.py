"""Pytest fixtures for markdown lexer and renderer tests."""

import pytest


@pytest.fixture
def grouped_doc() -> str:
    """A change type section with entries grouped by package."""
    return """## master

### 🐛 Bug fixes

- **`expo-foo`**
  - Fixed X.
  - Fixed Y.
- **`expo-bar`**
  - Fixed Z.
"""


@pytest.fixture
def doc_with_code() -> str:
    """A version section with a paragraph and a fenced code block."""
    return """## 1.0.0

Upgrade with:

```sh
npm install expo-foo
```

### 🐛 Bug fixes

- Fixed.
"""


@pytest.fixture
def ordered_doc() -> str:
    """A document with an ordered list."""
    return """## Steps

1. First step.
2. Second step.
3. Third step.
"""
