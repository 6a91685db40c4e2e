"""Import lines and small helpers shared by the template modules."""
from __future__ import annotations

from typing import TYPE_CHECKING, Tuple

from ...core.Types import KindTag

if TYPE_CHECKING:
    from ..engine import BlockContext


Definition = Tuple[str, str]

IMPORT_PANDAS: Definition = ("import_pandas", "import pandas as pd")
IMPORT_NUMPY: Definition = ("import_numpy", "import numpy as np")
IMPORT_SEABORN: Definition = ("import_seaborn", "import seaborn as sns")
IMPORT_PYPLOT: Definition = ("import_matplotlib.pyplot", "import matplotlib.pyplot as plt")
IMPORT_FOLIUM: Definition = ("import_folium", "import folium")


def require(block: "BlockContext", definition: Definition) -> None:
    block.add_definition(*definition)


def python_quote(text: str) -> str:
    """Quote ``text`` as a Python string literal, preferring single quotes."""
    text = text.replace("\\", "\\\\").replace("\n", "\\\n")
    quote = "'"
    if "'" in text:
        if '"' not in text:
            quote = '"'
        else:
            text = text.replace("'", "\\'")
    return quote + text + quote


def is_list(block: "BlockContext", code: str) -> bool:
    """Whether ``code`` names a variable holding a literal list."""
    return block.produced_by(code, KindTag.DYNAMIC_COLLECTION)


def as_frame(block: "BlockContext", code: str, transpose: bool = False) -> str:
    """Wrap a literal-list variable in a DataFrame so pandas/sklearn accept it."""
    if not is_list(block, code):
        return code
    require(block, IMPORT_PANDAS)
    return f"pd.DataFrame({code}).T" if transpose else f"pd.DataFrame({code})"
