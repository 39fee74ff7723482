LOOKAHEAD_Z = 0.6


def policy(env):
    # Strategy: stay in the current lane unless an obstacle inside the look-ahead
    # window blocks it; then pick the nearest free lane, preferring the side the
    # ship is already drifting toward so it does not cross a blocked lane.
    state = env.state
    current = env.target_lane
    blocked = {obs.lane for obs in state.obstacles if obs.z < LOOKAHEAD_Z}

    if current not in blocked:
        return [current, 1]

    lanes = range(env.config.LANES)
    free = [lane for lane in lanes if lane not in blocked]
    if not free:
        return [current, 1]  # Nowhere to go

    # Only lanes reachable without passing through a blocked one
    reachable = [
        lane for lane in free
        if all(mid not in blocked for mid in range(min(lane, current) + 1, max(lane, current)))
    ]
    candidates = reachable or free
    best = min(candidates, key=lambda lane: (abs(lane - state.player_position), abs(lane - current)))
    return [best, 1]
