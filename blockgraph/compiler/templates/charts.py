"""
Chart statements (seaborn, matplotlib, folium) and the layout block that
feeds their titles and axis labels.

Line and bar charts pick one of four renderings:

    aggregate    x is an aggregate result              plot(x)
    series       only one of x / y is plugged, and it   plot(x = s.index, y = s.values)
                 is neither a list nor a selection
    melted       y selects two or more columns          melt, then plot with hue
    plain        anything else                          plot(x = x, y = y)
"""
from __future__ import annotations

import json
import re
from typing import List, Optional, Tuple

from ...core.NodePort import BlockSchema, DynamicSockets, FieldSpec, SocketSpec
from ...core.Types import KindTag, Order, OutputKind
from ...noderegistry.NodeRegistry import block
from ..engine import tagged
from ..writer import CodeWriter
from .common import IMPORT_FOLIUM, IMPORT_PANDAS, IMPORT_PYPLOT, IMPORT_SEABORN, require


def _chart_schema(*sockets: SocketSpec) -> BlockSchema:
    return BlockSchema(
        sockets=[*sockets, SocketSpec("layout", OutputKind.LAYOUT, "{}")],
        output=OutputKind.NONE,
    )


def _series_socket(b) -> Optional[str]:
    """The one plugged operand when it should be drawn as index vs values."""
    for socket, other in (("x", "y"), ("y", "x")):
        if b.target(socket) is None or b.target(other) is not None:
            continue
        node = b.provenance(socket)
        if not tagged(node, KindTag.DYNAMIC_COLLECTION) and not tagged(node, KindTag.MULTI_SELECT):
            return socket
    return None


def _selection(b, node) -> Tuple[Optional[str], List[str]]:
    """DataFrame code and column codes of a selection block."""
    if not tagged(node, KindTag.MULTI_SELECT):
        return None, []
    dataframe = b.value("select", Order.MEMBER, node=node) or "None"
    columns = [b.raw(node.item_socket_name(i), Order.NONE, node=node) or "null" for i in b.items(node)]
    return dataframe, columns


def _melted(b, plot: str, layout: str) -> Optional[str]:
    """Reshape-then-plot form used when y selects several columns."""
    x_frame, x_columns = _selection(b, b.provenance("x"))
    y_frame, y_columns = _selection(b, b.provenance("y"))
    if len(y_columns) < 2:
        return None
    dataframe = y_frame or x_frame or '""'
    x = ", ".join(x_columns) or "None"
    require(b, IMPORT_PANDAS)
    return (
        f"melted_df = pd.melt({dataframe}, id_vars=[{', '.join(x_columns)}], "
        f"value_vars=[{', '.join(y_columns)}], var_name=\"hue\", value_name=\"value\")\n"
        f"sns.{plot}(data=melted_df, x={x}, y=\"value\", hue=\"hue\").set(**{layout})\n"
    )


def _xy_chart(b, plot: str, aggregates: bool) -> str:
    x = b.value("x", Order.MEMBER)
    y = b.value("y", Order.MEMBER)
    layout = b.value("layout", Order.MEMBER)
    require(b, IMPORT_SEABORN)

    if aggregates and (tagged(b.provenance("x"), KindTag.AGGREGATE_LIKE)
                       or b.produced_by(x, KindTag.AGGREGATE_LIKE)):
        return f"sns.{plot}({x}).set(**{layout})\n"

    series = _series_socket(b)
    if series is not None:
        s = x if series == "x" else y
        return f"sns.{plot}(x = {s}.index, y = {s}.values).set(**{layout})\n"

    melted = _melted(b, plot, layout)
    if melted is not None:
        return melted
    return f"sns.{plot}(x = {x}, y = {y}).set(**{layout})\n"


# ── Seaborn charts ────────────────────────────────────────────────────────────

@block("lineGraph", _chart_schema(
    SocketSpec("x", OutputKind.ARRAY, "None"),
    SocketSpec("y", OutputKind.ARRAY, "None"),
))
def lineGraph(b):
    return _xy_chart(b, "lineplot", aggregates=True)


@block("barGraph", _chart_schema(
    SocketSpec("x", OutputKind.ARRAY, "[]"),
    SocketSpec("y", OutputKind.ARRAY, "[]"),
))
def barGraph(b):
    return _xy_chart(b, "barplot", aggregates=False)


@block("histogramGraph", _chart_schema(
    SocketSpec("x", OutputKind.ARRAY, "[]"),
    SocketSpec("y", OutputKind.NUMBER),
))
def histogramGraph(b):
    x = b.value("x", Order.MEMBER)
    bins = b.value("y", Order.MEMBER)
    layout = b.value("layout", Order.MEMBER)
    require(b, IMPORT_SEABORN)
    if bins:
        return f"sns.histplot({x}, bins = {bins}, kde=False).set(**{layout})\n"
    return f"sns.histplot({x}, kde=False).set(**{layout})\n"


@block("boxplotGraph", _chart_schema(SocketSpec("x", OutputKind.ARRAY, "[]")))
def boxplotGraph(b):
    require(b, IMPORT_SEABORN)
    return f"sns.boxplot({b.value('x', Order.MEMBER)}).set(**{b.value('layout', Order.MEMBER)})\n"


@block("scatterGraph", _chart_schema(
    SocketSpec("x", OutputKind.ARRAY, "[]"),
    SocketSpec("y", OutputKind.ARRAY, "[]"),
    SocketSpec("colour", OutputKind.ARRAY),
))
def scatterGraph(b):
    x = b.value("x", Order.MEMBER)
    y = b.value("y", Order.MEMBER)
    colour = b.value("colour", Order.MEMBER)
    layout = b.value("layout", Order.MEMBER)
    hue = f", hue = {colour}" if colour else ""
    require(b, IMPORT_SEABORN)

    series = _series_socket(b)
    if series is not None:
        s = x if series == "x" else y
        return f"sns.scatterplot(x = {s}.index, y = {s}.values{hue}).set(**{layout})\n"
    return f"sns.scatterplot(x = {x}, y = {y}{hue}).set(**{layout})\n"


@block("heatMap", BlockSchema(
    sockets=[SocketSpec("data", OutputKind.TABULAR, "[]")],
    output=OutputKind.NONE,
))
def heatMap(b):
    require(b, IMPORT_SEABORN)
    return f"sns.heatmap({b.value('data', Order.MEMBER)}, annot=True)\n"


# ── Matplotlib and plain output ───────────────────────────────────────────────

_AFTER_FIRST_ENTRY = re.compile(r",.+", re.M)


@block("pieGraph", _chart_schema(
    SocketSpec("x", OutputKind.ARRAY, "[]"),
    SocketSpec("y", OutputKind.ARRAY, "[]"),
))
def pieGraph(b):
    x = b.value("x", Order.MEMBER)
    y = b.value("y", Order.MEMBER)
    code = f"plt.pie({y}, labels={x})"
    series = _series_socket(b)
    if series is not None:
        s = x if series == "x" else y
        code = f"plt.pie({s}.values, labels={s}.index)"

    # the legend only takes the first layout entry, used as its title
    layout = _AFTER_FIRST_ENTRY.sub("", b.value("layout", Order.MEMBER))
    if len(layout) > 2 and not layout.endswith("}"):
        layout += "}"
    if layout != "{}":
        code += f"\nplt.legend(**{layout})"
    require(b, IMPORT_PYPLOT)
    return code + "\n"


@block("tableViewGraph", BlockSchema(
    sockets=[SocketSpec("tableView", OutputKind.TABULAR, required=True)],
    output=OutputKind.NONE,
))
def tableViewGraph(b):
    return f"print({b.value('tableView', Order.MEMBER)})\n"


# ── Choropleth map ────────────────────────────────────────────────────────────

GEOGRAPHIES = {
    "usa": ("https://raw.githubusercontent.com/lcbjrrr/quant/master/us_states.json", 43, -85),
    "brazil": ("https://raw.githubusercontent.com/lcbjrrr/quant/master/br_states.json", -15.8299, -47.8599),
    "world": ("https://raw.githubusercontent.com/johan/world.geo.json/master/countries.geo.json", -15.8299, -30),
}


@block("mapGraph", BlockSchema(
    sockets=[
        SocketSpec("location", OutputKind.TABULAR, '""'),
        SocketSpec("values", OutputKind.TABULAR, "[]"),
        SocketSpec("zoom", OutputKind.NUMBER, "5"),
    ],
    fields=[FieldSpec("COUNTRY", "brazil", options=tuple(GEOGRAPHIES))],
    output=OutputKind.NONE,
))
def mapGraph(b):
    geojson, lon, lat = GEOGRAPHIES[b.field("COUNTRY")]
    zoom = b.value("zoom", Order.MEMBER)

    dataframe = "None"
    columns: List[str] = []
    location = b.provenance("location")
    if tagged(location, KindTag.MULTI_SELECT):
        dataframe = b.value("select", Order.MEMBER, node=location) or '""'
        columns.append(b.literal(location.item_socket_name(0), node=location) or "")
    values = b.provenance("values")
    if tagged(values, KindTag.MULTI_SELECT):
        columns.append(b.literal(values.item_socket_name(0), node=values) or "")

    writer = CodeWriter(unit=b.indent)
    writer.writeln(f"def {b.FN}(dataframe, columns, zoom):").push()
    writer.writeln(f"map = folium.Map(location=[{lon}, {lat}], zoom_start=zoom)")
    writer.writeln("folium.Choropleth(").push()
    writer.extend([
        f'geo_data = "{geojson}",',
        "data = dataframe,",
        "columns = columns,",
        'key_on = "feature.id",',
    ]).pop()
    writer.writeln(").add_to(map)")
    writer.writeln("return map")
    function = b.provide_function("choroplethMap", writer.lines())
    require(b, IMPORT_FOLIUM)
    return f"{function}({dataframe}, {json.dumps(columns, ensure_ascii=False)}, {zoom})\n"


# ── Layout ────────────────────────────────────────────────────────────────────

@block("layout", BlockSchema(
    dynamic=DynamicSockets(
        initial=3,
        item_default="None",
        item_fields=(FieldSpec("FIELDNAME", "", defaults=("xaxis", "yaxis", "title")),),
    ),
    output=OutputKind.LAYOUT,
))
def layout(b):
    entries = {}
    for i in b.items():
        key = b.item_field("FIELDNAME", i, "")
        entries.setdefault(key, b.item_value(i, Order.NONE))

    def pick(*keys: str) -> str:
        for key in keys:
            if key in entries:
                return entries[key]
        return "None"

    code = f"{{'title':{pick('title')}, 'xlabel':{pick('xaxis', 'x')}, 'ylabel':{pick('yaxis', 'y')}}}"
    return code, Order.FUNCTION_CALL
