"""Accrual benchmarks for StakedRewards.

Measures stake, claim and view latency on pools with growing numbers of
stakers. Per-operation cost should stay flat as the staker count grows.
"""

import statistics
import time

from stakedrewards import InMemoryToken, ManualClock, PoolConfig, StakedRewardsPool

ITERATIONS = 1_000
WARMUP = 50
OWNER = "bench:owner"
NOW = 1_700_000_000


def _percentile(data: list[float], pct: float) -> float:
    s = sorted(data)
    idx = int(len(s) * pct / 100)
    return s[min(idx, len(s) - 1)]


def _bench(fn, n: int = ITERATIONS, warmup: int = WARMUP) -> dict:
    for _ in range(warmup):
        fn()
    times: list[float] = []
    for _ in range(n):
        start = time.perf_counter()
        fn()
        times.append((time.perf_counter() - start) * 1_000)
    mean = statistics.mean(times)
    return {
        "iterations": n,
        "mean_ms": mean,
        "median_ms": statistics.median(times),
        "p50_ms": _percentile(times, 50),
        "p95_ms": _percentile(times, 95),
        "p99_ms": _percentile(times, 99),
        "min_ms": min(times),
        "max_ms": max(times),
        "stdev_ms": statistics.stdev(times) if n > 1 else 0.0,
        "ops_per_sec": 1_000 / mean if mean > 0 else float("inf"),
    }


def make_pool(stakers: int) -> tuple[StakedRewardsPool, InMemoryToken, ManualClock]:
    """Deploy a funded pool with *stakers* accounts already staked."""
    clock = ManualClock(NOW)
    staking = InMemoryToken("bench:staking")
    rewards = InMemoryToken("bench:rewards", initial_holder=OWNER, initial_supply=10**30)
    pool = StakedRewardsPool(
        staking, rewards, owner=OWNER, config=PoolConfig(initial_period_end=10), clock=clock
    )
    pool.set_new_period(OWNER, NOW + 1, NOW + 1 + 10**7)
    rewards.transfer(OWNER, pool.address, 10**24)
    pool.add_to_rewards_allocation(OWNER, 10**24)
    for i in range(stakers):
        account = f"bench:staker-{i}"
        staking.mint(account, 10**18)
        staking.approve(account, pool.address, 10**18)
        pool.stake(account, 10**18)
    return pool, staking, clock


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def bench_stake(stakers: int = 1_000) -> dict:
    """Stake latency with a populated pool."""
    pool, staking, clock = make_pool(stakers)
    account = "bench:staker-0"
    staking.mint(account, 10**30)
    staking.approve(account, pool.address, 10**30)

    def stake():
        clock.advance(1)
        pool.stake(account, 1)

    return _bench(stake)


def bench_claim(stakers: int = 1_000) -> dict:
    """Claim latency with a populated pool."""
    pool, _, clock = make_pool(stakers)

    def claim():
        clock.advance(1)
        pool.get_reward("bench:staker-0")

    return _bench(claim)


def bench_earned_view(stakers: int = 1_000) -> dict:
    """Read-only earned() latency."""
    pool, _, clock = make_pool(stakers)
    clock.advance(100)
    return _bench(lambda: pool.earned("bench:staker-0"), n=5_000)


def run_all() -> dict:
    """Run all accrual benchmarks."""
    results: dict = {}
    benchmarks = [
        ("stake_10_stakers", lambda: bench_stake(10)),
        ("stake_10k_stakers", lambda: bench_stake(10_000)),
        ("claim_10_stakers", lambda: bench_claim(10)),
        ("claim_10k_stakers", lambda: bench_claim(10_000)),
        ("earned_view", bench_earned_view),
    ]
    for name, fn in benchmarks:
        print(f"  Running {name}...", end=" ", flush=True)
        result = fn()
        results[name] = result
        print(f"{result['ops_per_sec']:.0f} ops/sec")
    return results


if __name__ == "__main__":
    print("=== Accrual Benchmarks ===")
    run_all()
