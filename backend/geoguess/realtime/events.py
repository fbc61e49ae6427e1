"""Socket.IO event names used between clients and the game server."""

# Client -> server
CREATE_ROOM = "createRoom"
JOIN_ROOM = "joinRoom"
START_GAME = "startGame"
SUBMIT_GUESS = "submitGuess"
RESTART_GAME = "restartGame"
REQUEST_LEADERBOARD = "requestLeaderboard"

# Server -> client(s)
ROOM_CREATED = "roomCreated"
ROOM_JOINED = "roomJoined"
PLAYER_LIST = "playerList"
NEW_ROUND = "newRound"
TIME_UPDATE = "timeUpdate"
PLAYER_GUESSED = "playerGuessed"
GUESS_RESULT = "guessResult"
ROUND_ENDED = "roundEnded"
GAME_OVER = "gameOver"
LEADERBOARD_UPDATE = "leaderboardUpdate"
ERROR = "error"
