from blockgraph.compiler import compile_graph
from blockgraph.core import Mutator


def _select(program, frame, *columns):
    node = program.bind(program.node("select"), select=program.get(frame))
    Mutator.set_arity(program.graph, node, len(columns))
    for i, column in enumerate(columns):
        program.graph.connect(node, f"ADD{i}", program.text(column))
    return node


def _layout(program, x, y, title):
    return program.bind(program.node("layout"), ADD0=program.text(x), ADD1=program.text(y), ADD2=program.text(title))


class TestLayout:

    def test_layout_entries(self, program):
        program.assign("style", _layout(program, "Year", "Sales", "Trend"))
        assert compile_graph(program.graph) == "style = {'title':'Trend', 'xlabel':'Year', 'ylabel':'Sales'}\n"

    def test_missing_entries_are_none(self, program):
        program.assign("style", program.node("layout"))
        assert compile_graph(program.graph) == "style = {'title':None, 'xlabel':None, 'ylabel':None}\n"

    def test_short_keys(self, program):
        layout = program.node("layout", FIELDNAME0="x", FIELDNAME1="title")
        Mutator.set_arity(program.graph, layout, 2)
        program.bind(layout, ADD0=program.text("Day"), ADD1=program.text("Visits"))
        program.assign("style", layout)
        assert compile_graph(program.graph) == "style = {'title':'Visits', 'xlabel':'Day', 'ylabel':None}\n"


class TestSeabornCharts:

    def test_line_of_aggregate(self, program):
        total = program.bind(program.node("aggFunc"), dataframe=program.get("df"), on=program.text("sales"))
        program.assign("total", total)
        program.statement(program.bind(program.node("lineGraph"), x=program.get("total")))
        source = compile_graph(program.graph)
        assert source.startswith("import seaborn as sns\n")
        assert source.endswith("sns.lineplot(total).set(**{})\n")

    def test_line_of_series(self, program):
        program.statement(program.bind(program.node("lineGraph"), x=program.get("s")))
        program.statement(program.bind(program.node("barGraph"), y=program.get("s")))
        source = compile_graph(program.graph)
        assert "sns.lineplot(x = s.index, y = s.values).set(**{})\n" in source
        assert "sns.barplot(x = s.index, y = s.values).set(**{})\n" in source

    def test_bar_of_lists(self, program):
        chart = program.bind(
            program.node("barGraph"),
            x=program.items(program.text("a"), program.text("b")),
            y=program.items(program.number(1), program.number(2)),
        )
        program.statement(chart)
        assert compile_graph(program.graph).endswith("sns.barplot(x = ['a', 'b'], y = [1, 2]).set(**{})\n")

    def test_layout_is_applied(self, program):
        chart = program.bind(program.node("barGraph"), x=program.get("a"), y=program.get("b"),
                             layout=_layout(program, "Year", "Sales", "Trend"))
        program.statement(chart)
        assert compile_graph(program.graph).endswith(
            "sns.barplot(x = a, y = b).set(**{'title':'Trend', 'xlabel':'Year', 'ylabel':'Sales'})\n")

    def test_several_columns_are_melted(self, program):
        chart = program.bind(program.node("lineGraph"), x=_select(program, "df", "year"),
                             y=_select(program, "df", "a", "b"))
        program.statement(chart)
        source = compile_graph(program.graph)
        assert source == (
            "import pandas as pd\n"
            "import seaborn as sns\n"
            "\n\n\n"
            "melted_df = pd.melt(df, id_vars=['year'], value_vars=['a', 'b'], "
            "var_name=\"hue\", value_name=\"value\")\n"
            "sns.lineplot(data=melted_df, x='year', y=\"value\", hue=\"hue\").set(**{})\n"
        )

    def test_melt_through_variables(self, program):
        program.assign("years", _select(program, "df", "year"))
        program.assign("sales", _select(program, "df", "a", "b"))
        program.statement(program.bind(program.node("barGraph"), x=program.get("years"), y=program.get("sales")))
        source = compile_graph(program.graph)
        assert "melted_df = pd.melt(df, id_vars=['year'], value_vars=['a', 'b']" in source
        assert "sns.barplot(data=melted_df, x='year'" in source

    def test_lone_variable_selecting_columns_is_melted(self, program):
        program.assign("cols", _select(program, "df", "a", "b"))
        program.statement(program.bind(program.node("lineGraph"), y=program.get("cols")))
        assert compile_graph(program.graph).endswith(
            "melted_df = pd.melt(df, id_vars=[], value_vars=['a', 'b'], var_name=\"hue\", value_name=\"value\")\n"
            "sns.lineplot(data=melted_df, x=None, y=\"value\", hue=\"hue\").set(**{})\n"
        )

    def test_lone_variable_holding_a_list_is_plotted_as_given(self, program):
        program.assign("v", program.items(program.number(1), program.number(2)))
        program.statement(program.bind(program.node("barGraph"), x=program.get("v")))
        assert compile_graph(program.graph).endswith("sns.barplot(x = v, y = []).set(**{})\n")

    def test_single_column_is_not_melted(self, program):
        chart = program.bind(program.node("lineGraph"), x=_select(program, "df", "year"),
                             y=_select(program, "df", "a"))
        program.statement(chart)
        assert compile_graph(program.graph).endswith('sns.lineplot(x = df["year"], y = df["a"]).set(**{})\n')

    def test_scatter_with_hue(self, program):
        chart = program.bind(program.node("scatterGraph"), x=program.get("a"), y=program.get("b"),
                             colour=program.get("c"))
        program.statement(chart)
        assert compile_graph(program.graph).endswith("sns.scatterplot(x = a, y = b, hue = c).set(**{})\n")

    def test_histogram(self, program):
        program.statement(program.bind(program.node("histogramGraph"), x=program.get("a")))
        program.statement(program.bind(program.node("histogramGraph"), x=program.get("a"), y=program.number(10)))
        source = compile_graph(program.graph)
        assert "sns.histplot(a, kde=False).set(**{})\n" in source
        assert "sns.histplot(a, bins = 10, kde=False).set(**{})\n" in source

    def test_boxplot_and_heatmap(self, program):
        program.statement(program.bind(program.node("boxplotGraph"), x=program.get("a")))
        program.statement(program.bind(program.node("heatMap"),
                                       data=program.bind(program.node("correlation"), dataframe=program.get("df"))))
        source = compile_graph(program.graph)
        assert "sns.boxplot(a).set(**{})\n" in source
        assert "sns.heatmap(df.corr(), annot=True)\n" in source
        assert source.count("import seaborn as sns") == 1


class TestOtherCharts:

    def test_pie_legend_takes_title_only(self, program):
        chart = program.bind(program.node("pieGraph"), x=program.get("labels"), y=program.get("values"),
                             layout=_layout(program, "Year", "Sales", "Trend"))
        program.statement(chart)
        assert compile_graph(program.graph) == (
            "import matplotlib.pyplot as plt\n"
            "\n\n\n"
            "plt.pie(values, labels=labels)\n"
            "plt.legend(**{'title':'Trend'})\n"
        )

    def test_pie_without_layout(self, program):
        program.statement(program.bind(program.node("pieGraph"), x=program.get("labels"), y=program.get("values")))
        assert compile_graph(program.graph).endswith("plt.pie(values, labels=labels)\n")

    def test_table_view(self, program):
        program.statement(program.bind(program.node("tableViewGraph"), tableView=program.get("df")))
        assert compile_graph(program.graph) == "print(df)\n"

    def test_choropleth_map(self, program):
        chart = program.bind(program.node("mapGraph", COUNTRY="usa"),
                             location=_select(program, "df", "state"),
                             values=_select(program, "df", "count"))
        program.statement(chart)
        source = compile_graph(program.graph)
        assert source.startswith("import folium\n\ndef choroplethMap(dataframe, columns, zoom):\n")
        assert "folium.Map(location=[43, -85], zoom_start=zoom)" in source
        assert 'geo_data = "https://raw.githubusercontent.com/lcbjrrr/quant/master/us_states.json",' in source
        assert source.endswith('choroplethMap(df, ["state", "count"], 5)\n')
