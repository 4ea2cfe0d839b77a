"""Backend adapters for the datagrid ports."""
