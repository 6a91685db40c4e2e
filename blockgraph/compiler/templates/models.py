"""
Model blocks (fit) and predictor blocks (predict), emitting scikit-learn and
keras code. Features that name a literal-list variable are wrapped in a
DataFrame and transposed so each list becomes a column.
"""
from __future__ import annotations

import ast
from typing import List

from ...core.NodePort import BlockSchema, SocketSpec
from ...core.Types import KindTag, Order, OutputKind
from ...noderegistry.NodeRegistry import block
from ..writer import CodeWriter
from .common import IMPORT_NUMPY, as_frame, is_list, require


def _model_schema(*extra: SocketSpec) -> BlockSchema:
    return BlockSchema(
        sockets=[
            *extra,
            SocketSpec("label", OutputKind.ARRAY, required=True),
            SocketSpec("features", OutputKind.ARRAY, required=True),
        ],
        output=OutputKind.MODEL,
        tags={KindTag.MODEL_LIKE},
    )


def _predictor_schema() -> BlockSchema:
    return BlockSchema(
        sockets=[
            SocketSpec("model", OutputKind.MODEL, required=True),
            SocketSpec("features", OutputKind.ARRAY, required=True),
        ],
        output=OutputKind.ARRAY,
    )


def _fit(b, estimator: str, definition: str) -> tuple:
    label = b.value("label", Order.MEMBER)
    features = as_frame(b, b.value("features", Order.MEMBER), transpose=True)
    b.add_definition(f"import_{estimator}", definition)
    return f"{estimator}().fit({features}, {label})", Order.FUNCTION_CALL


def _predict(b, order: float = Order.MEMBER, suffix: str = "") -> tuple:
    model = b.value("model", order)
    features = as_frame(b, b.value("features", order), transpose=True)
    return f"{model}.predict({features}){suffix}", Order.FUNCTION_CALL


# ── Regression and classification ─────────────────────────────────────────────

@block("linear_regression_model", _model_schema())
def linear_regression_model(b):
    return _fit(b, "LinearRegression", "from sklearn.linear_model import LinearRegression")


@block("logistic_regression_model", _model_schema())
def logistic_regression_model(b):
    return _fit(b, "LogisticRegression", "from sklearn.linear_model import LogisticRegression")


@block("naive_bayes_model", _model_schema())
def naive_bayes_model(b):
    return _fit(b, "MultinomialNB", "from sklearn.naive_bayes import MultinomialNB")


@block("knn_model", _model_schema(SocketSpec("k", OutputKind.NUMBER, "1")))
def knn_model(b):
    k = b.value("k", Order.MEMBER)
    label = b.value("label", Order.MEMBER)
    features = as_frame(b, b.value("features", Order.MEMBER), transpose=True)
    b.add_definition("import_sklearn.neighbors", "from sklearn.neighbors import KNeighborsClassifier")
    return f"KNeighborsClassifier(n_neighbors={k}).fit({features}, {label})", Order.FUNCTION_CALL


@block("decision_tree_model", _model_schema(SocketSpec("max_depth", OutputKind.NUMBER, "2")))
def decision_tree_model(b):
    label = b.value("label", Order.MEMBER)
    max_depth = b.value("max_depth", Order.MEMBER)
    features = as_frame(b, b.value("features", Order.MEMBER), transpose=True)
    b.add_definition(
        "import_sklearn.tree",
        "from sklearn.tree import DecisionTreeClassifier, export_graphviz\nfrom graphviz import Source",
    )
    writer = CodeWriter(unit=b.indent)
    writer.writeln(f"def {b.FN}(label, features, maxDepth):").push()
    writer.extend([
        "tree = DecisionTreeClassifier(max_depth=maxDepth).fit(features, label)",
        "labels = [str(x) for x in label.unique()]",
        "labels.sort()",
        "display(Source(export_graphviz(tree, filled=True, "
        "feature_names=features.columns.tolist(), class_names = labels)))",
        "return tree",
    ])
    function = b.provide_function("decisionTree", writer.lines())
    return f"{function}({label}, {features}, {max_depth})", Order.FUNCTION_CALL


def _hidden_layers(b, code: str) -> List[str]:
    try:
        layers = ast.literal_eval(code)
    except (ValueError, SyntaxError):
        b.warn(f"hidden layers {code!r} is not a literal list; using none")
        return []
    if not isinstance(layers, (list, tuple)):
        return []
    return [str(size) for size in layers]


@block("neural_network_model", _model_schema(SocketSpec("hidden_layers", OutputKind.ARRAY, "[]")))
def neural_network_model(b):
    label = b.value("label", Order.MEMBER)
    features = b.value("features", Order.MEMBER)
    width = ".T"
    if is_list(b, features):
        require(b, IMPORT_NUMPY)
        features = f"np.array({features}).T.tolist()"
        width = "[0]"

    writer = CodeWriter(unit=b.indent)
    writer.writeln(f"def {b.FN}(features, labels):").push()
    writer.writeln("nn = keras.Sequential([").push()
    writer.writeln(f"keras.layers.Input(shape=(len(features{width}),)),")
    for size in _hidden_layers(b, b.value("hidden_layers", Order.MEMBER)):
        writer.writeln(f'keras.layers.Dense({size}, activation="relu"),')
    writer.writeln('keras.layers.Dense(1, activation="sigmoid")').pop()
    writer.writeln("])")
    writer.blank()
    writer.extend([
        'nn.compile(optimizer="adam", loss="binary_crossentropy")',
        "nn.fit(features, labels)",
        "return nn",
    ])
    function = b.provide_function("neuralNetworkModel", writer.lines())
    b.add_definition(
        "import_sklearn.metrics_nn",
        "from sklearn.metrics import accuracy_score\nimport tensorflow\nfrom tensorflow import keras",
    )
    return f"{function}({features}, {label})", Order.FUNCTION_CALL


# ── Clustering ────────────────────────────────────────────────────────────────

@block("kmeans", BlockSchema(
    sockets=[
        SocketSpec("k", OutputKind.NUMBER, "2"),
        SocketSpec("features", OutputKind.ARRAY, required=True),
    ],
    output=OutputKind.ARRAY,
))
def kmeans(b):
    k = b.value("k", Order.MEMBER)
    features = as_frame(b, b.value("features", Order.MEMBER), transpose=True)
    b.add_definition("import_sklearn.cluster", "from sklearn.cluster import KMeans")
    return f"KMeans(n_clusters={k}).fit({features}).labels_", Order.FUNCTION_CALL


# ── Predictors ────────────────────────────────────────────────────────────────

@block("linear_regression_predictor", _predictor_schema())
def linear_regression_predictor(b):
    return _predict(b)


@block("logistic_regression_predictor", _predictor_schema())
def logistic_regression_predictor(b):
    return _predict(b)


@block("naive_bayes_predictor", _predictor_schema())
def naive_bayes_predictor(b):
    return _predict(b)


@block("knn_predictor", _predictor_schema())
def knn_predictor(b):
    return _predict(b, Order.ATOMIC)


@block("decision_tree_predictor", _predictor_schema())
def decision_tree_predictor(b):
    return _predict(b)


@block("neural_network_predictor", _predictor_schema())
def neural_network_predictor(b):
    code, _ = _predict(b, suffix=" > 0.5")
    return code, Order.RELATIONAL
