"""
DataFrame blocks: loading, column selection, construction, filtering,
grouping and train/test splitting. Emitted code targets pandas and
scikit-learn.
"""
from __future__ import annotations

import json

from ...core.NodePort import BlockSchema, DynamicSockets, FieldSpec, SocketSpec
from ...core.Types import KindTag, Order, OutputKind
from ...noderegistry.NodeRegistry import block
from .common import IMPORT_PANDAS, require


# ── Loading and construction ──────────────────────────────────────────────────

@block("read_csv", BlockSchema(
    sockets=[SocketSpec("read", OutputKind.STRING, required=True)],
    output=OutputKind.TABULAR,
    description="Load a CSV file from a path or URL",
))
def read_csv(b):
    require(b, IMPORT_PANDAS)
    return f"pd.read_csv({b.value('read', Order.MEMBER)})", Order.FUNCTION_CALL


@block("select", BlockSchema(
    sockets=[SocketSpec("select", OutputKind.TABULAR, required=True)],
    dynamic=DynamicSockets(initial=1, item_check=OutputKind.STRING),
    output=OutputKind.TABULAR,
    tags={KindTag.MULTI_SELECT},
    description="Select one or more columns by name",
))
def select(b):
    dataframe = b.value("select", Order.MEMBER)
    # column names are read from the plugged text blocks, not their code
    columns = [b.literal(b.node.item_socket_name(i)) or "" for i in b.items()]
    if len(columns) > 1:
        return f"{dataframe}[{json.dumps(columns, ensure_ascii=False)}]", Order.FUNCTION_CALL
    return f"{dataframe}{json.dumps(columns, ensure_ascii=False)}", Order.FUNCTION_CALL


@block("dataframe_dic", BlockSchema(
    dynamic=DynamicSockets(
        initial=3,
        item_check=OutputKind.ARRAY,
        item_fields=(FieldSpec("FIELDNAME", ""),),
    ),
    output=OutputKind.TABULAR,
    description="Build a DataFrame from column names and value lists",
))
def dataframe_dic(b):
    entries = []
    for i in b.items():
        values = b.raw(b.node.item_socket_name(i), Order.MEMBER)
        if not values:
            b.warn(f"column {i} has no values and is left out")
            continue
        name = json.dumps(str(b.item_field("FIELDNAME", i, "")), ensure_ascii=False)
        entries.append(f"{name}: {values}")
    require(b, IMPORT_PANDAS)
    return "pd.DataFrame({" + ", ".join(entries) + "})", Order.FUNCTION_CALL


# ── Row and column operations ─────────────────────────────────────────────────

@block("headTail", BlockSchema(
    sockets=[
        SocketSpec("dataframe", OutputKind.TABULAR, required=True),
        SocketSpec("n", OutputKind.NUMBER, "5"),
    ],
    fields=[FieldSpec("FIELDNAME", "head", options=("head", "tail"))],
    output=OutputKind.TABULAR,
))
def headTail(b):
    dataframe = b.value("dataframe", Order.MEMBER)
    if not dataframe:
        b.warn("no DataFrame connected")
        return "", Order.FUNCTION_CALL
    operation = b.field("FIELDNAME") or "head"
    return f"{dataframe}.{operation}({b.value('n', Order.MEMBER)})", Order.FUNCTION_CALL


@block("groupby", BlockSchema(
    sockets=[
        SocketSpec("dataframe", OutputKind.TABULAR, required=True),
        SocketSpec("by", OutputKind.STRING, "None"),
    ],
    output=OutputKind.TABULAR,
))
def groupby(b):
    dataframe = b.value("dataframe", Order.MEMBER)
    if not dataframe:
        b.warn("no DataFrame connected")
        return "", Order.FUNCTION_CALL
    return f"{dataframe}.groupby({b.value('by', Order.MEMBER)})", Order.FUNCTION_CALL


AGGREGATES = ("mean", "sum", "count", "max", "min", "std", "var")


@block("aggFunc", BlockSchema(
    sockets=[SocketSpec("dataframe", OutputKind.TABULAR, required=True), SocketSpec("on")],
    fields=[FieldSpec("FIELDNAME", "mean", options=AGGREGATES)],
    output=OutputKind.TABULAR,
    tags={KindTag.AGGREGATE_LIKE},
))
def aggFunc(b):
    dataframe = b.value("dataframe", Order.MEMBER)
    if not dataframe:
        b.warn("no DataFrame connected")
        return "", Order.NONE
    column = b.value("on", Order.MEMBER)
    if not column or column == "None":
        b.warn("no column to aggregate")
    return f"{dataframe}[{column}].{b.field('FIELDNAME')}()", Order.FUNCTION_CALL


COMPARISONS = {"gt": ">", "lt": "<", "ge": ">=", "le": "<=", "eq": "==", "ne": "!="}
JOINS = {"and": "&", "or": "|"}


@block("filter", BlockSchema(
    sockets=[SocketSpec("dataframe", OutputKind.TABULAR, required=True)],
    dynamic=DynamicSockets(
        initial=1,
        item_fields=(
            FieldSpec("FIELDNAME", "Field"),
            FieldSpec("DROPDOWN", "gt", options=tuple(COMPARISONS)),
            FieldSpec("MIDDLE", "and", options=tuple(JOINS), from_index=1),
        ),
    ),
    output=OutputKind.TABULAR,
    description="Keep the rows matching every condition",
))
def filter_rows(b):
    dataframe = b.value("dataframe", Order.MEMBER)
    parts = []
    for i in b.items():
        if i > 0:
            join = JOINS.get(b.item_field("MIDDLE", i))
            if join:
                parts.append(join)
        name = b.item_field("FIELDNAME", i)
        column = f'["{name}"]' if name else ""
        operator = COMPARISONS.get(b.item_field("DROPDOWN", i), "")
        value = b.item_value(i, Order.MEMBER)
        parts.append(f"({dataframe}{column}{operator}{value})")
    return f"{dataframe}[{' '.join(parts)}]", Order.FUNCTION_CALL


# ── Train / test split ────────────────────────────────────────────────────────

@block("train_test_split", BlockSchema(
    sockets=[
        SocketSpec("teste_size", OutputKind.NUMBER, "0.2"),
        SocketSpec("dataframe", OutputKind.TABULAR, "[]", required=True),
        SocketSpec("label", default="[]", required=True),
        SocketSpec("features", default="[]", required=True),
    ],
    output=OutputKind.ARRAY,
))
def train_test_split(b):
    dataframe = b.value("dataframe", Order.MEMBER)
    label = b.value("label", Order.MEMBER)
    features = b.value("features", Order.MEMBER)
    b.add_definition("import_sklearn.model_selection",
                     "from sklearn.model_selection import train_test_split")
    code = (f"train_test_split({dataframe}[{features}], {dataframe}[{label}], "
            f"test_size={b.value('teste_size', Order.MEMBER)})")
    return code, Order.FUNCTION_CALL


SPLIT_PARTS = {"x_train": 0, "x_test": 1, "y_train": 2, "y_test": 3}


@block("selector_train_test_split", BlockSchema(
    sockets=[SocketSpec("train_test", OutputKind.ARRAY, required=True)],
    fields=[FieldSpec("FIELDNAME", "x_train", options=tuple(SPLIT_PARTS))],
    output=OutputKind.TABULAR,
))
def selector_train_test_split(b):
    split = b.value("train_test", Order.MEMBER)
    if not split:
        b.warn("no train/test split connected")
        return "", Order.NONE
    index = SPLIT_PARTS.get(b.field("FIELDNAME"))
    if index is None:
        return "", Order.NONE
    return f"{split}[{index}]", Order.FUNCTION_CALL
