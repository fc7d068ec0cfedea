"""Entry point for running metadata2html as a module.

Usage:
    python -m scripts.metadata2html --metafile physics/scheme.meta --outputdir docs/arg_tables
    python -m scripts.metadata2html --config docs/metadata2html.yaml
"""

from .cli import main

if __name__ == "__main__":
    main()
