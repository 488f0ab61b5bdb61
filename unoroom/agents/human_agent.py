"""Human agent - reads actions from terminal."""

from unoroom.engine import Action, DrawCard, GameState


class HumanAgent:
    """Agent that prompts the human for input via terminal."""

    def __init__(self, name: str = "human"):
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def get_action(
        self,
        state: GameState,
        legal_actions: list[Action],
        player_id: str,
    ) -> Action | None:
        if not legal_actions:
            return None

        me = state.get_player(player_id)
        print("\n--- Your turn ---")
        print("Your hand:", " ".join(str(c) for c in me.hand))
        print("Top discard:", state.top_card(), f"(color: {state.current_color.value})")
        if state.pending_draw_count:
            print(f"Pending draw: {state.pending_draw_count}")
        print("Others:", ", ".join(f"{p.name}={len(p.hand)}" for p in state.players if p.id != player_id))
        print("\nLegal actions:")
        for i, a in enumerate(legal_actions):
            if isinstance(a, DrawCard):
                print(f"  {i}: DRAW")
            else:
                extra = f" (choose color: {a.chosen_color.value})" if a.chosen_color else ""
                print(f"  {i}: PLAY {a.card}{extra}")

        while True:
            try:
                raw = input("Enter number: ").strip()
                idx = int(raw)
                if 0 <= idx < len(legal_actions):
                    return legal_actions[idx]
            except (ValueError, EOFError):
                pass
            print("Invalid. Try again.")

    def wants_to_call_uno(self, state: GameState, player_id: str) -> bool:
        try:
            return input("Call UNO? [y/N] ").strip().lower().startswith("y")
        except EOFError:
            return False
