"""Pure economic calculations: equilibria, parameter draws and round accounting."""
