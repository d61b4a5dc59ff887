"""
Example 03: Persisting Definitions

This example demonstrates saving a definition as markup and into a SQLite
attribute store, then reloading it and checking it against its upstream.
"""

import tempfile
from pathlib import Path

from row_document import ConfigStore, SqliteAttributeStore, VariableSpace, output


def main():
    definition = (
        output("shop", "${COLLECTION}")
        .credentials("writer", "s3cret")
        .upsert()
        .match_key("sku")
        .field("price", "pricing.amount")
        .index("sku", unique=True)
        .build()
    )

    work_dir = Path(tempfile.mkdtemp())

    with SqliteAttributeStore(work_dir / "repository.db") as backend:
        store = ConfigStore(backend)

        markup_path = store.save_markup(definition, work_dir / "steps" / "products.xml")
        store.save_attributes(definition, "products-out")

        print("=== Markup ===\n")
        print(markup_path.read_text(encoding="utf-8"))

        from_markup = store.load_markup(markup_path)
        from_attributes = store.load_attributes("products-out")
        print(f"Encodings agree: {from_markup == from_attributes == definition}\n")

    print("=== Check ===\n")
    for result in from_attributes.check(has_upstream_schema=True, upstream_row_count=2, has_input_hops=True):
        print(f"  [{result.severity.value}] {result.message}")

    variables = VariableSpace.from_environment(COLLECTION="products")
    plan = from_attributes.compile(variables)
    print(f"\nIndexes: {[[(t.path, t.direction) for t in p.terms] for p in plan.index_plans]}")


if __name__ == "__main__":
    main()
