"""CLI / terminal mode for Tileplay."""

from __future__ import annotations

from tileplay.board import Board
from tileplay.events import GameEvent
from tileplay.game import GameState, save_snapshot
from tileplay.render import render_board
from tileplay.tile import Tile

EDGE_NAMES = ("top", "right", "bottom", "left")

HELP = """\
Commands:
  rack                  -- show your tiles
  select N              -- pick tile N from your rack (e.g. select 2)
  rotate                -- turn the selected tile a quarter
  moves                 -- list where the selected tile fits
  place X Y             -- put the selected tile down (e.g. place 4 4)
  skip                  -- pass the turn
  board                 -- print the board
  save FILE             -- write the game to a JSON snapshot
  png FILE              -- render the board to an image
  quit                  -- leave the game
"""


def describe_tile(tile: Tile) -> str:
    sides = " ".join(f"{name[0].upper()}:{side}" for name, side in zip(EDGE_NAMES, tile.rotated_sides))
    extra = f" [{tile.center_pattern}]" if tile.center_pattern else ""
    return f"{sides}{extra}"


def print_rack(state: GameState) -> None:
    player = state.get_current_player()
    print(f"\n  {player.name}  score {player.score}")
    for i, tile in enumerate(player.tiles, start=1):
        marker = "*" if state.selected_tile is not None and tile.id == state.selected_tile.id else " "
        print(f"  {marker}{i}. {describe_tile(tile)}")


def print_scores(state: GameState) -> None:
    print("=" * 40)
    for i, s in enumerate(state.final_scores or [], start=1):
        extra = f"  (path bonus {s.breakdown.bonus})" if s.breakdown.bonus else ""
        print(f" {i:>2}. {s.name:<20} {s.score:>5}{extra}")
    print("=" * 40)


def _print_board(board: Board) -> None:
    print()
    print(board)
    print()


def run_cli(state: GameState, input_fn=input) -> None:
    """Play *state* turn by turn from the terminal."""
    state.on(GameEvent.TURN_CHANGE, lambda p: print(f"\n  -- {p.name}'s turn --"))
    state.on(GameEvent.SCORE_POPUP, lambda d: print(f"  +{d['score']} points"))
    state.on(GameEvent.INVALID_PLACEMENT, lambda pos: print(f"  Tile does not fit at {pos}."))

    print("\n" + "=" * 60)
    print("  TILEPLAY -- terminal game")
    print("=" * 60)
    print()
    print(HELP)
    _print_board(state.board)
    print_rack(state)

    while not state.is_over:
        try:
            inp = input_fn("  play> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        parts = inp.split()
        if not parts:
            continue
        cmd = parts[0].lower()

        if cmd in ("quit", "exit"):
            break
        if cmd == "help":
            print(HELP)
        elif cmd == "rack":
            print_rack(state)
        elif cmd == "board":
            _print_board(state.board)
        elif cmd == "select" and len(parts) == 2:
            tiles = state.get_current_player().tiles
            try:
                tile = tiles[int(parts[1]) - 1]
            except (ValueError, IndexError):
                print(f"  Pick a tile between 1 and {len(tiles)}.")
                continue
            state.select_tile(tile)
            print(f"  Selected {describe_tile(tile)}")
        elif cmd == "rotate":
            if state.rotate_tile() is None:
                print("  Select a tile first.")
            else:
                print(f"  Now {describe_tile(state.selected_rotated_tile())}")
        elif cmd == "moves":
            moves = sorted(state.get_valid_moves())
            print("  " + (", ".join(f"({x},{y})" for x, y in moves) or "nowhere"))
        elif cmd == "place" and len(parts) == 3:
            try:
                x, y = int(parts[1]), int(parts[2])
            except ValueError:
                print("  Format: place X Y")
                continue
            result = state.place_tile((x, y))
            if not result.success:
                print(f"  Cannot place: {result.reason.value}")
                continue
            _print_board(state.board)
            if not state.is_over:
                print_rack(state)
        elif cmd == "skip":
            state.skip_turn()
            print_rack(state)
        elif cmd == "save" and len(parts) == 2:
            save_snapshot(state, parts[1])
            print(f"  Saved to {parts[1]}")
        elif cmd == "png" and len(parts) == 2:
            render_board(state.tile_set, state.board).save(parts[1])
            print(f"  Board image written to {parts[1]}")
        else:
            print("  Unknown command. Type 'help'.")

    state.player_manager.stop_turn_timer()
    if state.is_over:
        print("\nGAME OVER")
        print_scores(state)
