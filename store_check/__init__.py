"""Resolve text pasted from a map app to an affiliated store of the Seongnam child allowance program."""
