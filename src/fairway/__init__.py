"""Golf pick'em league: live score normalization, standings and payouts."""
