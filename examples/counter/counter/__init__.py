"""Counter example program: one owner-scoped counter PDA per owner."""
