"""
Evaluation and descriptive statistics blocks.
"""
from __future__ import annotations

from ...core.NodePort import BlockSchema, SocketSpec
from ...core.Types import KindTag, Order, OutputKind
from ...noderegistry.NodeRegistry import block
from ..engine import tagged
from .common import IMPORT_PANDAS, as_frame, is_list, require


NEURAL_NETWORK = "neural_network_model"


def _comparison_schema(first: str, second: str) -> BlockSchema:
    return BlockSchema(
        sockets=[
            SocketSpec(first, required=True),
            SocketSpec(second, OutputKind.ARRAY, required=True),
        ],
        output=OutputKind.NUMBER,
    )


@block("score", BlockSchema(
    sockets=[SocketSpec("model", OutputKind.MODEL, required=True)],
    output=OutputKind.NUMBER,
))
def score(b):
    model = b.value("model", Order.MEMBER)
    signature = b.signature("model")
    if signature is not None:
        label, features, kind = signature
    else:
        # the model block is plugged in directly; read its operands
        model_node = b.target("model")
        if model_node is None:
            return "", Order.FUNCTION_CALL
        label = b.value("label", Order.MEMBER, node=model_node)
        features = b.value("features", Order.MEMBER, node=model_node)
        kind = model_node.kind

    if kind == NEURAL_NETWORK:
        return f"accuracy_score({model}.predict({features}) > 0.5, {label})", Order.FUNCTION_CALL
    return f"{model}.score({features}, {label})", Order.FUNCTION_CALL


@block("accuracy", _comparison_schema("predictor", "expected_y"))
def accuracy(b):
    predictor = b.value("predictor", Order.ATOMIC)
    expected = as_frame(b, b.value("expected_y", Order.ATOMIC))
    b.add_definition("import_sklearn.metrics", "from sklearn.metrics import accuracy_score")
    return f"accuracy_score({predictor}, {expected})", Order.FUNCTION_CALL


@block("confusionMatrix", _comparison_schema("predictor", "true_labels"))
def confusionMatrix(b):
    predicted = b.value("predictor", Order.ATOMIC)
    expected = as_frame(b, b.value("true_labels", Order.ATOMIC))
    b.add_definition("import_sklearn.metrics_confusion", "from sklearn.metrics import confusion_matrix")
    return f"confusion_matrix({predicted}, {expected})", Order.FUNCTION_CALL


@block("precisionRecall", _comparison_schema("predictor", "true_labels"))
def precisionRecall(b):
    predicted = b.value("predictor", Order.ATOMIC)
    expected = as_frame(b, b.value("true_labels", Order.ATOMIC))
    b.add_definition("import_sklearn.metrics_classification",
                     "from sklearn.metrics import classification_report")
    return f"classification_report({expected}, {predicted})", Order.FUNCTION_CALL


@block("r2", _comparison_schema("model", "expected_y"))
def r2(b):
    model = b.value("model", Order.MEMBER)
    expected = as_frame(b, b.value("expected_y", Order.MEMBER))
    signature = b.signature("model")
    if signature is not None:
        model = f"{model}.predict({signature.features})"
    b.add_definition("import_sklearn.metrics_", "from sklearn import metrics")
    return f"metrics.r2_score({expected}, {model})", Order.FUNCTION_CALL


@block("correlation", BlockSchema(
    sockets=[SocketSpec("dataframe", OutputKind.TABULAR, required=True)],
    output=OutputKind.TABULAR,
))
def correlation(b):
    return f"{b.value('dataframe', Order.MEMBER)}.corr()", Order.FUNCTION_CALL


@block("frequency", BlockSchema(
    sockets=[SocketSpec("x", OutputKind.ARRAY, required=True), SocketSpec("bins", OutputKind.ARRAY)],
    output=OutputKind.TABULAR,
))
def frequency(b):
    base = as_frame(b, b.value("x", Order.MEMBER))
    bins = b.value("bins", Order.MEMBER)
    if bins:
        require(b, IMPORT_PANDAS)
        return f"pd.value_counts(pd.cut({base}, bins={bins}))", Order.FUNCTION_CALL
    return f"{base}.value_counts()", Order.FUNCTION_CALL


@block("quartis", BlockSchema(
    sockets=[SocketSpec("x", OutputKind.ARRAY, required=True)],
    output=OutputKind.TABULAR,
))
def quartis(b):
    value = b.value("x", Order.MEMBER)
    if is_list(b, value) or tagged(b.target("x"), KindTag.DYNAMIC_COLLECTION):
        require(b, IMPORT_PANDAS)
        return f"pd.DataFrame({value}).describe()", Order.FUNCTION_CALL
    return f"{value}.describe()", Order.FUNCTION_CALL
