"""RRSP/RRIF, TFSA and non-registered account projection and withdrawal sequencing."""

from dataclasses import dataclass

from retirement_sim_ca.reference import RRIF_MINIMUM_AGE, TaxDataProvider

# Capital gains share of a non-registered withdrawal when no cost basis is known
DEFAULT_GAIN_FRACTION = 0.5


@dataclass(frozen=True)
class AccountBalances:
    rrsp_rrif: float = 0.0
    tfsa: float = 0.0
    non_registered: float = 0.0

    @property
    def total(self) -> float:
        return self.rrsp_rrif + self.tfsa + self.non_registered


@dataclass(frozen=True)
class WithdrawalAmounts:
    rrsp_rrif: float = 0.0
    tfsa: float = 0.0
    non_registered: float = 0.0
    # Gain portion of the non-registered withdrawal (included in non_registered)
    capital_gains: float = 0.0
    # Mandatory RRIF minimum taken (included in rrsp_rrif)
    rrif_minimum: float = 0.0

    @property
    def total(self) -> float:
        return self.rrsp_rrif + self.tfsa + self.non_registered


@dataclass(frozen=True)
class AccountProjection:
    """One year of account activity. cost_basis is the basis after this year."""

    age: int
    starting_balance: AccountBalances
    contributions: AccountBalances
    investment_returns: AccountBalances
    withdrawals: WithdrawalAmounts
    ending_balance: AccountBalances
    cost_basis: float
    rrif_minimum_percentage: float = 0.0


def minimum_withdrawal(provider: TaxDataProvider, rrif_balance: float, age: int) -> float:
    """Mandatory RRIF withdrawal on the start-of-year balance (0 before age 55)."""
    if age < RRIF_MINIMUM_AGE or rrif_balance <= 0:
        return 0.0
    return rrif_balance * provider.get_minimum_withdrawal_percentage(age)


def project_account_growth(
    starting_balance: float,
    contribution: float,
    withdrawal: float,
    rate_of_return: float,
) -> tuple[float, float]:
    """Apply start-of-year flows, then growth. Returns (investment_return, ending_balance).

    Ending balance is clamped at zero.
    """
    net = starting_balance + contribution - withdrawal
    investment_return = net * rate_of_return
    return investment_return, max(0.0, net + investment_return)


def calc_withdrawal_sequence(
    target_withdrawal: float,
    balances: AccountBalances,
    minimum: float,
    cost_basis: float = 0.0,
) -> WithdrawalAmounts:
    """Draw target_withdrawal in fixed order, never overdrawing an account.

    1. RRIF minimum (always, even if target is already covered or zero)
    2. Non-registered
    3. Remaining RRSP/RRIF
    4. TFSA

    A cost_basis of 0 is read as unknown, not as all gain: the realised
    gain is then DEFAULT_GAIN_FRACTION of the non-registered withdrawal.
    """
    remaining = target_withdrawal

    rrif_minimum = min(minimum, balances.rrsp_rrif) if minimum > 0 else 0.0
    rrsp = rrif_minimum
    remaining -= rrif_minimum
    if remaining <= 0:
        return WithdrawalAmounts(rrsp_rrif=rrsp, rrif_minimum=rrif_minimum)

    non_registered = 0.0
    capital_gains = 0.0
    if balances.non_registered > 0:
        non_registered = min(remaining, balances.non_registered)
        if cost_basis > 0:
            gain_ratio = max(0.0, (balances.non_registered - cost_basis) / balances.non_registered)
        else:
            gain_ratio = DEFAULT_GAIN_FRACTION
        capital_gains = non_registered * gain_ratio
        remaining -= non_registered

    available_rrsp = balances.rrsp_rrif - rrsp
    if available_rrsp > 0 and remaining > 0:
        extra = min(remaining, available_rrsp)
        # Exact balance when emptied, so no float residue is left behind
        rrsp = balances.rrsp_rrif if extra == available_rrsp else rrsp + extra
        remaining -= extra

    tfsa = 0.0
    if balances.tfsa > 0 and remaining > 0:
        tfsa = min(remaining, balances.tfsa)
        remaining -= tfsa

    return WithdrawalAmounts(
        rrsp_rrif=rrsp,
        tfsa=tfsa,
        non_registered=non_registered,
        capital_gains=capital_gains,
        rrif_minimum=rrif_minimum,
    )


def update_cost_basis(cost_basis: float, starting_balance: float,
                      contribution: float, withdrawal: float) -> float:
    """Add contributions; reduce by the fraction of the starting balance withdrawn."""
    cost_basis += contribution
    if withdrawal > 0 and starting_balance > 0:
        ratio = min(1.0, withdrawal / starting_balance)
        cost_basis *= 1 - ratio
    return max(0.0, cost_basis)


def project_year(
    provider: TaxDataProvider,
    balances: AccountBalances,
    age: int,
    drawing_down: bool,
    rate_of_return: float,
    target_withdrawal: float = 0.0,
    contributions: AccountBalances | None = None,
    cost_basis: float = 0.0,
) -> AccountProjection:
    """Project all three accounts one year forward.

    Accumulating: contributions in, no withdrawals.
    Drawing down: no contributions, withdrawals via calc_withdrawal_sequence.
    """
    rrif_percentage = 0.0
    if drawing_down:
        contributions = AccountBalances()
        rrif_percentage = provider.get_minimum_withdrawal_percentage(age)
        minimum = minimum_withdrawal(provider, balances.rrsp_rrif, age)
        withdrawals = calc_withdrawal_sequence(target_withdrawal, balances, minimum, cost_basis)
    else:
        contributions = contributions or AccountBalances()
        withdrawals = WithdrawalAmounts()

    rrsp_return, rrsp_end = project_account_growth(
        balances.rrsp_rrif, contributions.rrsp_rrif, withdrawals.rrsp_rrif, rate_of_return,
    )
    tfsa_return, tfsa_end = project_account_growth(
        balances.tfsa, contributions.tfsa, withdrawals.tfsa, rate_of_return,
    )
    nonreg_return, nonreg_end = project_account_growth(
        balances.non_registered, contributions.non_registered, withdrawals.non_registered, rate_of_return,
    )

    return AccountProjection(
        age=age,
        starting_balance=balances,
        contributions=contributions,
        investment_returns=AccountBalances(rrsp_return, tfsa_return, nonreg_return),
        withdrawals=withdrawals,
        ending_balance=AccountBalances(rrsp_end, tfsa_end, nonreg_end),
        cost_basis=update_cost_basis(
            cost_basis, balances.non_registered,
            contributions.non_registered, withdrawals.non_registered,
        ),
        rrif_minimum_percentage=rrif_percentage,
    )
