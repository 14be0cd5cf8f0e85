"""Core timing, record assembly and SPC analytics for Bakeline."""
