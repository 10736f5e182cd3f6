"""
L0 Data — Shell configuration templates.

Rendered once per run with ``{key}`` substitution of known keys only
(see ``execution.shell_config.render_template``), so shell syntax
such as ``${VAR}`` or ``HEAD@{1}`` passes through untouched.

Keys: ``{theme_path}``, ``{plugin_dir}``, ``{bat}``, ``{fd}``.
"""

from __future__ import annotations

INPUTRC_TEMPLATE = r"""# Input settings
set meta-flag on
set input-meta on
set output-meta on
set convert-meta off

# Completion settings
set completion-ignore-case on
set completion-prefix-display-length 2
set show-all-if-ambiguous on
set show-all-if-unmodified on

# Arrow key history search
"\e[A": history-search-backward
"\e[B": history-search-forward
"\e[C": forward-char
"\e[D": backward-char

# Directory and file completion settings
set mark-symlinked-directories on
set match-hidden-files off
set page-completions off
set completion-query-items 200
set visible-stats on

$if Bash
  set skip-completed-text on
  set colored-stats on
$endif
"""

ZSHRC_TEMPLATE = r"""# Oh My Posh configuration
eval "$(oh-my-posh init zsh --config {theme_path})"

# ZSH Plugins
source {plugin_dir}/zsh-autosuggestions/zsh-autosuggestions.zsh
source {plugin_dir}/zsh-syntax-highlighting/zsh-syntax-highlighting.zsh

# File system aliases using modern alternatives
alias ls='eza -lh --group-directories-first --icons'
alias lsa='ls -a'
alias lt='eza --tree --level=2 --long --icons --git'
alias lta='lt -a'
alias ff="fzf --preview '{bat} --style=numbers --color=always {}'"
alias fd="{fd}"

# Directory navigation
alias ..='cd ..'
alias ...='cd ../..'
alias ....='cd ../../..'

# Git
alias g='git'
alias gs='git status'
alias ga='git add'
alias gaa='git add --all'
alias gcm='git commit -m'
alias gca='git commit --amend'
alias gd='git diff'
alias gf='git fetch'
alias gl='git log'
alias gll='git log --graph --oneline --all --decorate'
alias gb='git branch'
alias gco='git checkout'
alias gcob='git checkout -b'
alias gps='git push'
alias gpl='git pull'
alias gst='git stash'
alias gstp='git stash pop'
alias grb='git rebase'
alias gm='git merge'
alias gundo='git reset --soft HEAD~1'
alias gredo='git commit -c HEAD@{1}'
alias gunpushed='git diff origin/$(git rev-parse --abbrev-ref HEAD)..'

# Compression utilities
compress() {
    tar -czf "${1%/}.tar.gz" "${1%/}"
}
alias decompress="tar -xzf"

# WSL-specific (if applicable)
alias explorer='explorer.exe .'

# Environment settings
export EDITOR='nano'
export PAGER='less'

# History settings
HISTSIZE=10000
SAVEHIST=10000
setopt HIST_IGNORE_ALL_DUPS
setopt HIST_FIND_NO_DUPS
setopt HIST_REDUCE_BLANKS
"""

# Debian/Ubuntu rename two binaries to avoid clashes.
BINARY_ALIASES: dict[str, dict[str, str]] = {
    "apt": {"bat": "batcat", "fd": "fdfind"},
    "dnf": {"bat": "bat", "fd": "fd"},
    "pacman": {"bat": "bat", "fd": "fd"},
}
