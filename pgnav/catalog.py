"""The pgnav navigation tree: which menus exist and how each action renders."""
from __future__ import annotations

from .providers import QueryProvider
from .providers.postgres import PostgresClient
from .tui.search import field_predicate
from .tui.state import Action, Menu, NavigationTree, View
from .tui.template import RenderTemplate

_schema_table = field_predicate("schema", "name")
_name_only = field_predicate("name")

SCHEMA_TEMPLATE = RenderTemplate(
    active="» {name:bold cyan} ({owner:bold red})",
    inactive="  {name:cyan} ({owner:red})",
    details=(
        "\n--------- Schema ----------"
        "\n[dim]Name:[/dim]              {name}"
        "\n[dim]Owner:[/dim]             {owner}"
        "\n[dim]Catalog name:[/dim]      {catalog_name}"
        "\n[dim]Tables in Schema:[/dim]  {table_count}"
    ),
)

TABLE_TEMPLATE = RenderTemplate(
    active="» {schema:bold green}.{name:bold cyan}",
    inactive="  {schema:green}.{name:cyan}",
    details=(
        "\n --------- Table ----------"
        "\n [dim]Name:[/dim]        {name}"
        "\n [dim]Type:[/dim]        {table_type}"
        "\n [dim]Table Size:[/dim]  {table_size}"
        "\n [dim]Index Size:[/dim]  {indexes_size}"
        "\n [dim]Total Size:[/dim]  {total_size}"
    ),
)

VIEW_TEMPLATE = RenderTemplate(
    active="» {schema:bold green}.{name:bold cyan}: {definition}",
    inactive="  {schema:green}.{name:cyan}: {definition}",
    details=(
        "\n --------- View ----------"
        "\n [dim]References:[/dim]  {referenced_schema}.{referenced_name}"
    ),
)

MATERIALIZED_VIEW_TEMPLATE = RenderTemplate(
    active=(
        "» {schema:bold green}.{name:bold cyan} ({owner:red}): "
        "({referenced_schema}.{referenced_name}) {definition}"
    ),
    inactive=(
        "  {schema:green}.{name:cyan} ({owner:red}): "
        "({referenced_schema}.{referenced_name}) {definition}"
    ),
    details=(
        "\n --------- Materialized view ----------"
        "\n [dim]Owner:[/dim]       {owner}"
        "\n [dim]Populated:[/dim]   {is_populated}"
        "\n [dim]References:[/dim]  {referenced_schema}.{referenced_name}"
    ),
)

SCHEMA_COUNT_TEMPLATE = RenderTemplate(
    active="» {schema:bold green}: {table_count:bold blue}",
    inactive="  {schema:green}: {table_count:blue}",
)

TABLE_SIZE_TEMPLATE = RenderTemplate(
    active="» {schema:bold green}.{name:bold cyan}: {size:bold blue}",
    inactive="  {schema:green}.{name:cyan}: {size:blue}",
)

TABLE_SIZE_INDEX_TEMPLATE = RenderTemplate(
    active=(
        "» {schema:bold green}.{name:bold cyan}: {size:bold blue} "
        "(Internal {data_size:blue} | External {external_size:blue})"
    ),
    inactive=(
        "  {schema:green}.{name:cyan}: {size:blue} "
        "(Internal {data_size:blue} | External {external_size:blue})"
    ),
)

ROW_COUNT_TEMPLATE = RenderTemplate(
    active="» {schema:bold green}.{name:bold cyan}: {rows:bold blue} rows",
    inactive="  {schema:green}.{name:cyan}: {rows:blue} rows",
)

EMPTY_TABLE_TEMPLATE = RenderTemplate(
    active="» {schema:bold green}.{name:bold cyan}: 0 rows",
    inactive="  {schema:green}.{name:cyan}: 0 rows",
)

ROW_BUCKET_TEMPLATE = RenderTemplate(
    active="» {row_count:bold cyan}: {table_count:bold blue}",
    inactive="  {row_count:cyan}: {table_count:blue}",
)

COLUMN_FREQUENCY_TEMPLATE = RenderTemplate(
    active="» {name:bold green}: {tables:bold cyan} ({percent_tables:bold blue})",
    inactive="  {name:green}: {tables:cyan} ({percent_tables:blue})",
    details=(
        "\n --------- Columns ----------"
        "\n [dim]Column Name:[/dim]           {name}"
        "\n [dim]Table Count:[/dim]           {tables}"
        "\n [dim]Percentage of Tables:[/dim]  {percent_tables}"
    ),
)


def build_tree(client: PostgresClient) -> NavigationTree:
    """Construct the full menu tree over *client*'s queries."""

    def action(name: str, query, view: View) -> Action:
        return Action(name=name, provider=QueryProvider(query), view=view)

    schemas = Menu("Schemas", "Schema Options", (
        action("All", client.schemas,
               View("Schemas", SCHEMA_TEMPLATE, _name_only)),
        action("User Created", client.schemas_user_created,
               View("Schemas", SCHEMA_TEMPLATE, _name_only)),
    ))

    tables = action("Tables", client.tables, View("Tables", TABLE_TEMPLATE, _schema_table))

    views = Menu("Views", "Views", (
        action("All", client.views, View("Views", VIEW_TEMPLATE, _schema_table)),
        action("Materialized", client.materialized_views,
               View("Materialized Views", MATERIALIZED_VIEW_TEMPLATE, _schema_table)),
    ))

    stats = Menu("Stats", "Stats", (
        action("Table Count Per Schema", client.table_count_per_schema,
               View("Tables by Schema", SCHEMA_COUNT_TEMPLATE, field_predicate("schema"))),
        action("Tables By Size", client.tables_by_size,
               View("Tables by Size", TABLE_SIZE_TEMPLATE, _schema_table)),
        action("Tables By Size With Indexes", client.tables_by_size_with_indexes,
               View("Tables by Size with Index", TABLE_SIZE_INDEX_TEMPLATE, _schema_table)),
        action("Table Row Counts", client.table_row_counts,
               View("Tables by Rows", ROW_COUNT_TEMPLATE, _schema_table)),
        action("Empty Tables", client.empty_tables,
               View("Empty Tables", EMPTY_TABLE_TEMPLATE, _schema_table)),
        action("Tables Grouped By Rows", client.tables_grouped_by_rows,
               View("Tables Grouped By Rows", ROW_BUCKET_TEMPLATE)),
        action("Column Name Frequencies", client.column_name_frequencies,
               View("Column Frequencies", COLUMN_FREQUENCY_TEMPLATE, _name_only)),
        action("Postgres Version", client.server_version, View("Postgres Version")),
    ))

    explore = Menu("Explore", "Where to?", (schemas, tables, views, stats))
    playground = Menu("PlayGround", "PlayGround")

    return NavigationTree(Menu("Back to Start", "Options", (explore, playground)))
