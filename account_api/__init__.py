"""Account lifecycle API: login, profiles and deletion."""
