"""Constants and shared configuration for the metadata2html package."""

# Templates
FRAGMENT_TEMPLATE = "arg_table.html.j2"
INDEX_TEMPLATE = "index.html.j2"

# Generated files
FRAGMENT_SUFFIX = ".html"
INDEX_FILENAME = "index.html"

# Metadata section headers
TABLE_PROPERTIES_HEADER = "ccpp-table-properties"
ARG_TABLE_HEADER = "ccpp-arg-table"

# Allowed values
TABLE_TYPES = ("scheme", "ddt", "host", "module")
INTENTS = ("in", "out", "inout")
TRUE_VALUES = ("true", "t", ".true.")
FALSE_VALUES = ("false", "f", ".false.")

# Properties accepted on each block kind
TABLE_PROPERTY_KEYS = ("name", "type", "dependencies", "relative_path", "dependencies_path")
ARG_TABLE_KEYS = ("name", "type", "dependencies")
REQUIRED_ARGUMENT_KEYS = ("standard_name", "units", "dimensions", "type")
ARGUMENT_KEYS = REQUIRED_ARGUMENT_KEYS + (
    "long_name",
    "kind",
    "intent",
    "optional",
    "active",
    "allocatable",
    "pointer",
    "protected",
    "polymorphic",
    "persistence",
    "state_variable",
    "diagnostic_name",
    "diagnostic_name_fixed",
    "default_value",
    "advected",
    "constituent",
    "molar_mass",
    "top_at_one",
)

# Columns of the generated table, in order: (argument attribute, header label)
TABLE_COLUMNS = (
    ("local_name", "local_name"),
    ("standard_name", "standard_name"),
    ("long_name", "description"),
    ("units", "units"),
    ("type", "type"),
    ("dimensions", "dimensions"),
    ("kind", "kind"),
    ("intent", "intent"),
    ("optional", "optional"),
)

# Exit codes
EXIT_SUCCESS = 0  # All fragments written (write mode) or in sync (check mode)
EXIT_DIFF_DETECTED = 1  # Out-of-sync fragments in check mode
EXIT_ERROR = 2  # Usage, configuration, content or I/O error
