"""Pure game logic: vector math, difficulty, chains, traps and scoring."""
