"""Record types, validation helpers and the error taxonomy shared by the stores."""
