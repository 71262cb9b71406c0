"""Terminal UI layer for jaskmoney."""
