from multijack.common.card import Rank

BLACKJACK = 21
DEALER_NAME = "Dealer"
DEALER_STAND_ON = 17
INITIAL_CARDS = 2

ACE_HIGH = 11
ACE_LOW = 1


def blackjack_value(rank: Rank) -> int:
    """Get the blackjack value of a rank, with the ace counted low."""
    return min(rank.value, 10)
