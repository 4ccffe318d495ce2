"""Absentee weight redistribution and weighted pass rule.

This module is pure: no I/O, no clock, no logging. Given the same
members and ballots it always produces the same adjusted strengths and
verdicts.

Redistribution (per affiliation group, exempt group excluded):
    adjusted = round_half_up(base + base * sum_absent / sum_present)

Each present member absorbs a share of the group's absent weight
proportional to their own base strength. The arithmetic is exact
(``fractions.Fraction``) so the only rounding step is the final
half-up, and group totals differ from ``sum_present + sum_absent`` by
at most half a unit per present member.

Pass rule:
    passed = supporters_count >= min_supporters and total_for > total_against

The head-count gate means a single supporter cannot carry a proposal no
matter how much weight they hold.
"""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Iterable
from fractions import Fraction

from src.domain.models.member import Member
from src.domain.models.tally import (
    BallotCount,
    GroupRedistribution,
    RedistributionResult,
)
from src.domain.models.vote import Vote, VoteChoice

# Affiliation whose members keep their base strength untouched
DEFAULT_EXEMPT_AFFILIATION = "NEZ"

# Label for members with a blank affiliation
DEFAULT_INDEPENDENT_LABEL = "Independent"

# Minimum number of For ballots (by head count) for a proposal to pass
DEFAULT_MIN_SUPPORTERS = 2


def round_half_up(value: Fraction) -> int:
    """Round a non-negative rational to the nearest integer, ties upward.

    >>> round_half_up(Fraction(27, 2))
    14
    >>> round_half_up(Fraction(40, 3))
    13
    """
    return math.floor(value + Fraction(1, 2))


def adjusted_strength(base: int, sum_present: int, sum_absent: int) -> int:
    """Adjusted strength of one present member of a non-exempt group.

    Args:
        base: The member's base strength.
        sum_present: Group's total present base strength (must be > 0).
        sum_absent: Group's total absent base strength.
    """
    return round_half_up(base + Fraction(base * sum_absent, sum_present))


def compute_adjusted_strengths(
    members: Iterable[Member],
    exempt_affiliation: str = DEFAULT_EXEMPT_AFFILIATION,
    independent_label: str = DEFAULT_INDEPENDENT_LABEL,
) -> RedistributionResult:
    """Compute the adjusted strength of every present member.

    Present exempt-group members keep their base strength; absent ones
    contribute nothing. Every other group redistributes its absent
    weight among its present members. A group with no present weight
    loses its absent weight; it is reported through
    ``RedistributionResult.anomalies`` and never moved to another group.

    Args:
        members: All members of the chamber.
        exempt_affiliation: Label of the exempt group.
        independent_label: Label replacing blank affiliations.

    Returns:
        RedistributionResult with strengths for present members only.
    """
    adjusted: dict[str, int] = {}
    grouped: dict[str, list[Member]] = defaultdict(list)
    exempt_present = 0
    exempt_absent = 0

    for member in members:
        group = member.affiliation_group(independent_label)
        if group == exempt_affiliation:
            if member.present:
                adjusted[member.id] = member.electoral_strength
                exempt_present += member.electoral_strength
            else:
                exempt_absent += member.electoral_strength
            continue
        grouped[group].append(member)

    groups: list[GroupRedistribution] = []
    if exempt_present or exempt_absent:
        groups.append(
            GroupRedistribution(
                affiliation=exempt_affiliation,
                sum_present=exempt_present,
                sum_absent=exempt_absent,
                adjusted_total=exempt_present,
                exempt=True,
            )
        )

    for label, group_members in grouped.items():
        present = [member for member in group_members if member.present]
        sum_present = sum(member.electoral_strength for member in present)
        sum_absent = sum(
            member.electoral_strength
            for member in group_members
            if not member.present
        )

        adjusted_total = 0
        if sum_present > 0:
            for member in present:
                strength = adjusted_strength(
                    member.electoral_strength, sum_present, sum_absent
                )
                adjusted[member.id] = strength
                adjusted_total += strength
        else:
            # Zero-strength present members still get an explicit 0
            for member in present:
                adjusted[member.id] = 0

        groups.append(
            GroupRedistribution(
                affiliation=label,
                sum_present=sum_present,
                sum_absent=sum_absent,
                adjusted_total=adjusted_total,
            )
        )

    groups.sort(key=lambda group: group.affiliation)
    return RedistributionResult(adjusted_strengths=adjusted, groups=tuple(groups))


def proposal_passes(
    supporters_count: int,
    total_for: int,
    total_against: int,
    min_supporters: int = DEFAULT_MIN_SUPPORTERS,
) -> bool:
    """Weighted majority gated by a minimum head count of supporters."""
    return supporters_count >= min_supporters and total_for > total_against


def count_ballots(
    votes: Iterable[Vote],
    redistribution: RedistributionResult,
    min_supporters: int = DEFAULT_MIN_SUPPORTERS,
) -> BallotCount:
    """Aggregate a proposal's ballots with adjusted strengths.

    Voters without an adjusted strength (absent at tally time) weigh 0
    but still count as supporters when they voted For.
    """
    total_for = 0
    total_against = 0
    supporters = 0
    for vote in votes:
        weight = redistribution.strength_of(vote.voter_id)
        if vote.choice is VoteChoice.FOR:
            total_for += weight
            supporters += 1
        elif vote.choice is VoteChoice.AGAINST:
            total_against += weight

    return BallotCount(
        total_for=total_for,
        total_against=total_against,
        supporters_count=supporters,
        passed=proposal_passes(supporters, total_for, total_against, min_supporters),
    )
