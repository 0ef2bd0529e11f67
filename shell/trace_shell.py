#!/usr/bin/env python3
"""
btreetrace Interactive Shell (Command-line shell for the trace engine)

Type comma-separated keys to insert them as one batch, then walk through
the recorded steps with .next / .prev / .seek and inspect the tree at any
point with .show.
"""

import sys
import os
import logging
from typing import List, Optional

try:
    import readline
except ImportError:
    # readline not available on some systems
    readline = None

from btreetrace.btree import SplitPolicy
from btreetrace.errors import BTreeTraceError
from btreetrace.keys import parse_degree, parse_int
from btreetrace.logconfig import configure_logging
from btreetrace.node import BTreeNode
from btreetrace.session import TraceSession

logger = logging.getLogger(__name__)

HISTORY_FILE = os.path.expanduser("~/.btreetrace_history")


def format_tree(node: BTreeNode, highlight=(), indent: str = "") -> List[str]:
    """Indented outline of a snapshot, highlighted keys wrapped in *"""
    if not node.keys and node.is_leaf and not indent:
        return ["(empty tree)"]

    marked = [f"*{k}*" if k in highlight else str(k) for k in node.keys]
    kind = "leaf" if node.is_leaf else "node"
    lines = [f"{indent}{kind} [{', '.join(marked)}]"]
    for child in node.children:
        lines.extend(format_tree(child, highlight, indent + "    "))
    return lines


class TraceShell:
    """Interactive B-Tree trace shell"""

    def __init__(self, session: Optional[TraceSession] = None):
        self.session = session or TraceSession()
        self.history = []

        # Command aliases
        self.commands = {
            'help': self.show_help,
            'h': self.show_help,
            '?': self.show_help,
            'quit': self.quit_shell,
            'exit': self.quit_shell,
            'q': self.quit_shell,
            'degree': self.change_degree,
            'reset': self.reset_tree,
            'steps': self.show_steps,
            'next': self.step_forward,
            'n': self.step_forward,
            'prev': self.step_backward,
            'p': self.step_backward,
            'seek': self.seek,
            'play': self.play,
            'show': self.show_tree,
            'export': self.export_tree,
            'history': self.show_history,
            'keys': self.show_keys,
        }

        self.setup_readline()

    def setup_readline(self):
        """Configure readline for command history and completion"""
        if readline is None:
            return
        readline.set_completer(self.completer)
        readline.parse_and_bind("tab: complete")
        if os.path.exists(HISTORY_FILE):
            try:
                readline.read_history_file(HISTORY_FILE)
            except OSError as e:
                logger.debug(f"Could not read shell history: {e}")

    def completer(self, text: str, state: int) -> Optional[str]:
        """Auto-completion for shell commands"""
        options = []
        if text.startswith('.'):
            options = [f".{cmd}" for cmd in self.commands if cmd.startswith(text[1:])]
        try:
            return options[state]
        except IndexError:
            return None

    def display_banner(self):
        """Display startup banner"""
        print("""
===============================================================
                 btreetrace Interactive Shell
         Step-by-step B-Tree insertion with replay

  Type keys like: 10, 20, 30
  Type .help for commands
===============================================================
        """)
        print(self.session.header())
        print()

    def display_prompt(self) -> str:
        return f"btree(m={self.session.max_degree})> "

    def parse_command(self, input_line: str) -> tuple:
        """Parse input line for commands and key lists"""
        input_line = input_line.strip()

        if input_line.startswith('.'):
            parts = input_line[1:].split(' ', 1)
            command = parts[0].lower()
            args = parts[1] if len(parts) > 1 else ""
            return ('command', command, args)
        elif input_line == "":
            return ('empty', "", "")
        else:
            return ('keys', input_line, "")

    def insert_keys(self, text: str):
        """Insert a batch of keys and print its trace"""
        try:
            accepted = self.session.insert_text(text)
        except BTreeTraceError as e:
            print(f"Error: {e.message}")
            return

        self.history.append(text)
        for i, step in enumerate(self.session.player.steps):
            print(f"  {i + 1:>3}. {step.icon} {step.description}")
        print(f"\n{accepted} key(s) inserted. {self.session.header()}")
        self.show_tree()

    def show_help(self, args: str = ""):
        """Display help information"""
        print("""
btreetrace Interactive Shell - Help

INPUT:
  10, 20, 30        - Insert keys (comma-separated) as one batch

SHELL COMMANDS:
  .help, .h, .?     - Show this help
  .quit, .exit, .q  - Exit the shell
  .degree N         - Change maxDegree (existing keys are replayed)
  .reset            - Empty the tree
  .steps            - List the steps of the last batch
  .next, .n         - Step forward
  .prev, .p         - Step backward
  .seek N           - Jump to step N (1-based, 0 = before the first step)
  .play             - Play the remaining steps
  .show             - Show the tree at the current step
  .keys             - Show accepted keys in insertion order
  .export [DIR]     - Write the current snapshot as JSON
  .history          - Show input history
        """)

    def change_degree(self, args: str = ""):
        try:
            degree = parse_degree(args)
        except BTreeTraceError as e:
            print(f"Error: {e.message}")
            return
        self.session.change_degree(degree)
        print(self.session.header())
        self.show_tree()

    def reset_tree(self, args: str = ""):
        self.session.reset()
        print(f"Tree reset. {self.session.header()}")

    def show_steps(self, args: str = ""):
        player = self.session.player
        if not player.steps:
            print("No steps yet. Insert keys to see trace.")
            return
        for i, step in enumerate(player.steps):
            marker = ">" if i == player.current else " "
            print(f"{marker} {i + 1:>3}. {step.icon} {step.description}")

    def show_current(self):
        step = self.session.player.current_step()
        if step is not None:
            print(f"{step.icon} {step.description}")
        print(self.session.header())
        self.show_tree()

    def step_forward(self, args: str = ""):
        if not self.session.player.step_forward():
            print("Already at the last step")
            return
        self.show_current()

    def step_backward(self, args: str = ""):
        if not self.session.player.step_backward():
            print("Already before the first step")
            return
        self.show_current()

    def seek(self, args: str = ""):
        index = parse_int(args)
        if index is None:
            print("Usage: .seek N")
            return
        self.session.player.seek(index - 1)
        self.show_current()

    def play(self, args: str = ""):
        for step in self.session.player.play():
            print(f"{step.icon} {step.description}")
        self.show_tree()

    def show_tree(self, args: str = ""):
        step = self.session.player.current_step()
        highlight = step.highlight_keys if step is not None else ()
        for line in format_tree(self.session.current_tree(), highlight):
            print(f"  {line}")

    def show_keys(self, args: str = ""):
        keys = self.session.tree.get_inserted_keys()
        print(", ".join(str(k) for k in keys) if keys else "No keys inserted")

    def export_tree(self, args: str = ""):
        try:
            path = self.session.export(args.strip() or None)
        except BTreeTraceError as e:
            print(f"Error: {e.message}")
            return
        print(f"Exported to {path}")

    def show_history(self, args: str = ""):
        if not self.history:
            print("No input history available")
            return
        for i, entry in enumerate(self.history, 1):
            print(f"{i:>3}. {entry}")

    def quit_shell(self, args: str = ""):
        """Exit the shell"""
        if readline is not None:
            try:
                readline.write_history_file(HISTORY_FILE)
            except OSError as e:
                logger.debug(f"Could not write shell history: {e}")

        print("\nGoodbye!")
        sys.exit(0)

    def handle_line(self, user_input: str):
        """Dispatch one input line"""
        cmd_type, content, args = self.parse_command(user_input)

        if cmd_type == 'empty':
            return
        elif cmd_type == 'command':
            if content in self.commands:
                self.commands[content](args)
            else:
                print(f"Unknown command: .{content}")
                print("Type .help for available commands")
        elif cmd_type == 'keys':
            self.insert_keys(content)

    def run(self):
        """Main shell loop"""
        self.display_banner()

        while True:
            try:
                self.handle_line(input(self.display_prompt()))
            except EOFError:
                print("\nGoodbye!")
                break
            except KeyboardInterrupt:
                print("\nUse .quit to exit")
                continue


def main(argv: Optional[List[str]] = None):
    """Entry point for the btreetrace shell"""
    import argparse

    parser = argparse.ArgumentParser(description="btreetrace - step-recording B-Tree shell")
    parser.add_argument("--degree", "-m", type=str, help="maxDegree (at least 3)")
    parser.add_argument("--policy", type=str, choices=[p.value for p in SplitPolicy], help="Split policy")
    parser.add_argument("--keys", "-k", type=str, help="Insert these keys and print the trace, then exit")
    parser.add_argument("--export", type=str, metavar="DIR", help="With --keys: export the final tree to DIR")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        degree = parse_degree(args.degree) if args.degree else None
        session = TraceSession(max_degree=degree, split_policy=args.policy)
    except BTreeTraceError as e:
        print(f"Error: {e.message}")
        sys.exit(2)

    shell = TraceShell(session)

    if args.keys:
        shell.insert_keys(args.keys)
        if args.export:
            shell.export_tree(args.export)
        return

    shell.run()


if __name__ == "__main__":
    main()
