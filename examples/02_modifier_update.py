"""
Example 02: Modifier Updates

This example demonstrates modifier-update mode: match queries, per-branch
apply policies and operator-grouped update bodies.
"""

from row_document import ApplyPolicy, DocumentAssembler, ModifierOperation, output


def main():
    definition = (
        output("shop", "customers")
        .modifier_update()
        .match_key("customer_id", "_id", use_incoming_name=False)
        .modifier("name", "profile.name", ModifierOperation.SET)
        .modifier("visits", "stats.visits", ModifierOperation.INCREMENT)
        .modifier("order", "orders", ModifierOperation.SET, ApplyPolicy.INSERT_ONLY)
        .modifier("order", "orders", ModifierOperation.PUSH, ApplyPolicy.UPDATE_ONLY)
        .build()
    )

    plan = definition.compile()
    assembler = DocumentAssembler(plan)
    row = {"customer_id": 7, "name": "Alice", "visits": 1, "order": {"sku": "A"}}

    print("=== Modifier Update ===\n")
    print(f"Existence check needed: {plan.policy.requires_existence_check(definition.mappings)}")
    print(f"Match query: {assembler.match_query(row)}")
    print(f"Insert branch: {assembler.modifier_update(row, is_insert=True)}")
    print(f"Update branch: {assembler.modifier_update(row, is_insert=False)}")


if __name__ == "__main__":
    main()
