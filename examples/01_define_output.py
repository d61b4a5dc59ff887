"""
Example 01: Defining an Output Step

This example demonstrates authoring an OutputDefinition with the builder DSL
and assembling insert documents from rows.
"""

from row_document import DocumentAssembler, output


def main():
    definition = (
        output("shop", "orders")
        .hosts("localhost")
        .field("order_id", "_id", use_incoming_name=False)
        .field("customer", "customer.name", use_incoming_name=False)
        .field("city", "customer.address")
        .field("items", "lines", use_incoming_name=False, json_fragment=True)
        .index("customer.name:1,_id:-1")
        .build()
    )

    print("=== Output Definition ===\n")
    for mapping in definition.mappings:
        print(f"  {mapping.incoming_name!r} -> {mapping.document_path!r}")
    for index in definition.indexes:
        print(f"  index: {index}")
    print()

    # Each worker compiles its own plan
    plan = definition.clone().compile()
    assembler = DocumentAssembler(plan)

    rows = [
        {"order_id": 1, "customer": "Alice", "city": "Oslo", "items": '[{"sku": "A", "qty": 2}]'},
        {"order_id": 2, "customer": "Bob", "city": None, "items": "[]"},
    ]

    print("=== Documents ===\n")
    for document in assembler.map_many(rows):
        print(f"  {document}")


if __name__ == "__main__":
    main()
