"""Interactive console front end"""

from typing import List

from core.exceptions import AddressParseError
from utils.addressing import column_to_letter, parse_address
from assistant.suggestions import QUICK_FORMULAS

HELP = """Commands:
  set <addr> <value>   commit a value or =formula
  select <addr>        move the selection
  show                 print the used range
  ai <request>         generate a formula into the selected cell
  insights             analyze the sheet
  chat <message>       talk to the assistant
  apply                apply the last formula proposed in chat
  quick <n>            apply quick formula n
  quit                 leave"""


def render_table(editor, min_rows: int = 5, min_cols: int = 3) -> str:
    """Plain-text grid of display values covering every used cell"""
    cells = list(editor.cells.values())
    rows = max([c.row + 1 for c in cells] + [min_rows])
    cols = max([c.col + 1 for c in cells] + [min_cols])

    table: List[List[str]] = [[""] + [column_to_letter(c) for c in range(cols)]]
    for r in range(rows):
        line = [str(r + 1)]
        for c in range(cols):
            cell = editor.store.get_at(r, c)
            line.append(editor.display_value(cell.id) if cell else "")
        table.append(line)

    widths = [max(len(row[i]) for row in table) for i in range(cols + 1)]
    return "\n".join(
        " | ".join(value.rjust(widths[i]) for i, value in enumerate(row))
        for row in table
    )


class ConsoleShell:
    """Line-oriented REPL over a :class:`SpreadsheetEditor`"""

    def __init__(self, editor):
        self.editor = editor

    async def run(self):
        print("Gridmind - type 'help' for commands")
        print(render_table(self.editor))
        while True:
            try:
                line = input(f"{self.editor.controller.selected_address}> ").strip()
            except EOFError:
                break
            if not line:
                continue
            if line in ("quit", "exit"):
                break
            await self.handle(line)

    async def handle(self, line: str):
        command, _, rest = line.partition(" ")
        rest = rest.strip()
        controller = self.editor.controller

        try:
            if command == "help":
                print(HELP)
            elif command == "set":
                target, _, value = rest.partition(" ")
                position = parse_address(target.upper())
                self.editor.set_cell_value(position.row, position.col, value)
            elif command == "select":
                position = parse_address(rest.upper())
                controller.select(position.row, position.col)
            elif command == "show":
                print(render_table(self.editor))
            elif command == "ai":
                result = await self.editor.generate_formula(rest)
                if result:
                    print(f"{result.formula}  ({result.confidence:.0f}% confident)")
            elif command == "insights":
                analysis = await self.editor.refresh_insights()
                if analysis is None:
                    print("Nothing to analyze yet")
                    return
                for insight in analysis.insights:
                    print(f"  • {insight}")
                for suggestion in analysis.suggestions:
                    print(f"  → {suggestion}")
                for chart in analysis.chart_recommendations:
                    print(f"  [{chart.type.value}] {chart.title} ({chart.data_range})")
            elif command == "chat":
                message = await self.editor.chat(rest)
                if message:
                    print(message.content)
                    if message.formula:
                        print(f"Formula found: {message.formula} (type 'apply' to use it)")
            elif command == "apply":
                formulas = [m.formula for m in self.editor.chat_assistant.messages if m.formula]
                if not formulas:
                    print("No formula proposed yet")
                    return
                self.editor.apply_chat_formula(formulas[-1])
            elif command == "quick":
                index = int(rest) - 1
                if index < 0:
                    raise IndexError(index)
                self.editor.apply_suggestion(QUICK_FORMULAS[index].formula)
            else:
                print(f"Unknown command: {command}")
        except AddressParseError as e:
            print(f"Error: {e}")
        except (ValueError, IndexError):
            print("Error: invalid argument")
