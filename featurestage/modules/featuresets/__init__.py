"""Feature-set dependency staging: resolve feature-set members and stage them."""
