"""
Shell completion scripts.

bash(app), zsh(app) and fish(app) return a script completing the visible
top-level commands, the groups and their visible subcommands (fish also
completes each command's visible flags). install(app) registers the
"completion <shell>" command that prints one of them:

    source <(myapp completion bash)
    myapp completion zsh > "${fpath[1]}/_myapp"
    myapp completion fish > ~/.config/fish/completions/myapp.fish
"""
from .arguments import Arg
from .faults import HandlerError

SHELLS = ("bash", "zsh", "fish")


def _names(app):
    names = [name for name, command in sorted(app.commands.items()) if not command.hidden]
    return names + sorted(app.groups)


def _visible(commands):
    return [(name, command) for name, command in sorted(commands.items()) if not command.hidden]


def _zsh_escape(text):
    return text.replace("'", "'\\''").replace(":", "\\:")


def _fish_escape(text):
    return text.replace("'", "\\'")


def bash(app, /):
    cases = []
    for name, group in sorted(app.groups.items()):
        words = " ".join(sub for sub, _ in _visible(group.commands))
        cases.append(
            "        %s)\n"
            "            COMPREPLY=( $(compgen -W \"%s\" -- ${cur}) )\n"
            "            return 0\n"
            "            ;;\n" % (name, words)
        )
    return (
        "# bash completion for {name}\n"
        "\n"
        "_{name}_completions() {{\n"
        "    local cur prev commands\n"
        "    COMPREPLY=()\n"
        "    cur=\"${{COMP_WORDS[COMP_CWORD]}}\"\n"
        "    prev=\"${{COMP_WORDS[COMP_CWORD-1]}}\"\n"
        "\n"
        "    commands=\"{commands}\"\n"
        "\n"
        "    case \"${{prev}}\" in\n"
        "        {name})\n"
        "            COMPREPLY=( $(compgen -W \"${{commands}}\" -- ${{cur}}) )\n"
        "            return 0\n"
        "            ;;\n"
        "{cases}"
        "    esac\n"
        "\n"
        "    COMPREPLY=( $(compgen -f -- ${{cur}}) )\n"
        "}}\n"
        "\n"
        "complete -F _{name}_completions {name}\n"
    ).format(name=app.name, commands=" ".join(_names(app)), cases="".join(cases))


def zsh(app, /):
    name = app.name
    lines = ["#compdef %s" % name, "", "__%s_commands() {" % name, "    local commands", "    commands=("]
    for command_name, command in _visible(app.commands):
        lines.append("        '%s:%s'" % (command_name, _zsh_escape(command.description)))
    for group_name, group in sorted(app.groups.items()):
        lines.append("        '%s:%s'" % (group_name, _zsh_escape(group.description)))
    lines += ["    )", "    _describe -t commands '%s commands' commands" % name, "}", ""]

    for group_name, group in sorted(app.groups.items()):
        lines += ["__%s_group_%s() {" % (name, group_name), "    local commands", "    commands=("]
        for command_name, command in _visible(group.commands):
            lines.append("        '%s:%s'" % (command_name, _zsh_escape(command.description)))
        lines += ["    )", "    _describe -t commands '%s %s commands' commands" % (name, group_name), "}", ""]

    lines += [
        "_%s() {" % name,
        "    local curcontext=\"$curcontext\" state line",
        "    typeset -A opt_args",
        "",
        "    _arguments -C \\",
        "        '1: :__%s_commands' \\" % name,
        "        '*::arg:->args'",
        "",
        "    case $state in",
        "        args)",
        "            case $line[1] in",
    ]
    for group_name in sorted(app.groups):
        lines += [
            "                %s)" % group_name,
            "                    __%s_group_%s" % (name, group_name),
            "                    ;;",
        ]
    lines += [
        "            esac",
        "            ;;",
        "    esac",
        "}",
        "",
        "if (( $+functions[compdef] )); then",
        "    compdef _%s %s" % (name, name),
        "fi",
    ]
    return "\n".join(lines) + "\n"


def fish(app, /):
    name = app.name
    lines = ["# fish completion for %s" % name, "", "complete -c %s -f" % name, ""]
    for command_name, command in _visible(app.commands):
        lines.append("complete -c %s -n '__fish_use_subcommand' -a '%s' -d '%s'" % (
            name, command_name, _fish_escape(command.description)))
        for flag in command.flags:
            if flag.hidden:
                continue
            short = " -s '%s'" % flag.short if flag.short else ""
            lines.append("complete -c %s -n '__fish_seen_subcommand_from %s'%s -l '%s' -d '%s'" % (
                name, command_name, short, flag.name, _fish_escape(flag.help)))
    for group_name, group in sorted(app.groups.items()):
        lines += ["", "# Group: %s" % group_name]
        lines.append("complete -c %s -n '__fish_use_subcommand' -a '%s' -d '%s'" % (
            name, group_name, _fish_escape(group.description)))
        for command_name, command in _visible(group.commands):
            lines.append("complete -c %s -n '__fish_seen_subcommand_from %s' -a '%s' -d '%s'" % (
                name, group_name, command_name, _fish_escape(command.description)))
    return "\n".join(lines) + "\n"


GENERATORS = {"bash": bash, "zsh": zsh, "fish": fish}


def script(app, shell, /):
    """the completion script of app for shell."""
    if (generator := GENERATORS.get(shell)) is None:
        raise HandlerError(
            "unsupported shell: %s" % shell,
            hint="use one of %s" % ", ".join(SHELLS),
        )
    return generator(app)


def _completion(context):
    context.stdout.write(script(context.app, context.arg(0)))


def install(app, /):
    """register the "completion <shell>" command on app."""
    return app.command("completion", "Generate shell completion scripts") \
        .add_arg(Arg("shell", "Shell type (%s)" % ", ".join(SHELLS))) \
        .run(_completion)


__all__ = (
    "SHELLS",
    "bash",
    "zsh",
    "fish",
    "script",
    "install",
)
