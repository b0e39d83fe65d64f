"""NakshatraTalks API: astrologer consultations billed per minute from a prepaid wallet."""
