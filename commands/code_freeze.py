#!/usr/bin/env python3
"""Code freeze commands."""

import os

from utils.code_freeze import (
	DAYS_BETWEEN_CODE_FREEZE_AND_RELEASE,
	get_future_date,
	get_today,
	is_second_tuesday,
)


def _set_github_output(name: str, value: str) -> None:
	path = os.getenv("GITHUB_OUTPUT")
	if not path:
		return
	with open(path, "a", encoding="utf-8") as f:
		f.write(f"{name}={value}\n")


def verify_day(override: str = "now") -> bool:
	"""Print whether today is code freeze day and return the answer."""
	today = get_today(override)
	future_date = get_future_date(today)
	print(f"Today's timestamp UTC is: {today.strftime('%a, %d %b %Y %H:%M:%S GMT')}\n")
	print(
		f"Checking to see if {DAYS_BETWEEN_CODE_FREEZE_AND_RELEASE} days from today "
		f"is the second Tuesday of the month.\n"
	)
	is_code_freeze_day = is_second_tuesday(future_date)
	print(
		f"{future_date.strftime('%a, %d %b %Y %H:%M:%S GMT')} "
		f"{'is' if is_code_freeze_day else 'is not'} release day.\n"
	)
	print(f"Today is {'indeed' if is_code_freeze_day else 'not'} code freeze day.")
	_set_github_output("freeze", "true" if is_code_freeze_day else "false")
	return is_code_freeze_day
